"""Configuration file management for dropletkit."""

import os
from typing import Any, Dict, Optional

import yaml

from .validator import ConfigValidationError, ConfigValidator

# Config-file keys mapped to the pre-set names the certificate workflow reads.
CERTBOT_KEYS = {
    "server_type": "SERVER_TYPE",
    "domains": "DOMAINS",
    "email": "EMAIL",
    "redirect": "REDIRECT",
    "staging": "STAGING",
    "key_type": "KEY_TYPE",
    "ec_curve": "EC_CURVE",
    "webroot_path": "WEBROOT_PATH",
}


class ConfigManager:
    """Loads and flattens dropletkit YAML configuration files."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to a YAML configuration file
        """
        self.config_path = config_path
        self.validator = ConfigValidator()
        self._config_cache: Optional[Dict[str, Any]] = None

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """
        Load the configuration file, or an empty config when none was given.

        Args:
            validate: Whether to validate the configuration

        Returns:
            Dict[str, Any]: Loaded configuration

        Raises:
            ConfigValidationError: If validation fails
            FileNotFoundError: If config file doesn't exist
        """
        if self.config_path is None:
            return {}

        if self._config_cache is not None:
            return self._config_cache

        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError([f"Invalid YAML in {self.config_path}: {e}"])

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigValidationError([f"{self.config_path}: top level must be a mapping"])

        if validate:
            errors = self.validator.validate_config(config)
            if errors:
                raise ConfigValidationError(errors)

        self._config_cache = config
        return config

    def certbot_values(self) -> Dict[str, str]:
        """
        Get the certbot section flattened to pre-set values.

        Booleans become ``y``/``n`` and domain lists become space separated,
        matching what an operator would export in the environment.
        """
        section = self.load_config().get("certbot") or {}
        values = {}

        for key, name in CERTBOT_KEYS.items():
            if key not in section or section[key] is None:
                continue
            value = section[key]
            if isinstance(value, bool):
                value = "y" if value else "n"
            elif isinstance(value, list):
                value = " ".join(value)
            values[name] = str(value)

        return values

    def hook_services(self) -> list:
        """Get extra services the deploy hook should reload."""
        section = self.load_config().get("certbot") or {}
        return list(section.get("hook_services", []))

    def bootstrap_settings(self) -> Dict[str, Any]:
        """Get bootstrap overrides with the database block flattened."""
        section = dict(self.load_config().get("bootstrap") or {})
        database = section.pop("database", None) or {}
        if "name" in database:
            section["db_name"] = database["name"]
        if "user" in database:
            section["db_user"] = database["user"]
        return section

    def clear_cache(self) -> None:
        """Clear configuration cache."""
        self._config_cache = None
