"""Configuration validation for dropletkit."""

from typing import Any, Dict, List

import jsonschema

from ..utils.errors import ConfigurationError, create_error_suggestions, format_validation_errors
from .schemas import MAIN_CONFIG_SCHEMA


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            "Configuration validation failed",
            details=format_validation_errors(errors),
            suggestions=create_error_suggestions("configuration_invalid"),
        )


class ConfigValidator:
    """Validates dropletkit configuration files."""

    def __init__(self):
        self.schema_validator = jsonschema.Draft7Validator(MAIN_CONFIG_SCHEMA)

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate a parsed configuration file.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        for error in sorted(self.schema_validator.iter_errors(config), key=lambda e: [str(part) for part in e.path]):
            location = ".".join(str(part) for part in error.path) or "<root>"
            errors.append(f"{location}: {error.message}")

        certbot = config.get("certbot") or {}
        if isinstance(certbot, dict):
            errors.extend(self._validate_certbot_section(certbot))

        return errors

    def _validate_certbot_section(self, certbot: Dict[str, Any]) -> List[str]:
        """Cross-field checks the schema cannot express."""
        errors = []

        domains = certbot.get("domains")
        if isinstance(domains, str) and not domains.replace(",", " ").split():
            errors.append("certbot.domains: must name at least one domain")

        email = certbot.get("email")
        if isinstance(email, str) and email and "@" not in email:
            errors.append(f"certbot.email: '{email}' is not an email address")

        return errors
