"""Resolved certificate request options."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

from ..utils.errors import ConfigurationError, create_error_suggestions

RSA_KEY_SIZE = 4096
TRUTHY = ("y",)


class ServerMode(Enum):
    """How certbot proves control of the domains."""

    NGINX = "nginx"
    APACHE = "apache"
    STANDALONE = "standalone"
    WEBROOT = "webroot"


class KeyType(Enum):
    """Certificate private key algorithm."""

    RSA = "rsa"
    ECDSA = "ecdsa"


class EllipticCurve(Enum):
    """Curves certbot accepts for ECDSA keys."""

    SECP256R1 = "secp256r1"
    SECP384R1 = "secp384r1"
    SECP521R1 = "secp521r1"


def parse_domains(raw: str) -> Tuple[str, ...]:
    """
    Split comma- or whitespace-separated domains into an ordered tuple.

    >>> parse_domains("a.com, b.com c.com")
    ('a.com', 'b.com', 'c.com')
    """
    return tuple(token for token in re.split(r"[,\s]+", raw or "") if token)


def parse_flag(value: str) -> bool:
    """Interpret a pre-set yes/no value. Only ``y`` (any case) means yes."""
    return (value or "").strip().lower() in TRUTHY


def _coerce(enum_cls, value: str, label: str):
    normalized = (value or "").strip().lower()
    try:
        return enum_cls(normalized)
    except ValueError:
        choices = "/".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Unknown {label}: {value}",
            details=f"Expected one of {choices}",
            suggestions=create_error_suggestions("configuration_invalid"),
        )


@dataclass(frozen=True)
class CertbotOptions:
    """Immutable configuration for a single certificate request."""

    server_mode: ServerMode
    domains: Tuple[str, ...]
    email: str
    redirect: bool = True
    staging: bool = False
    key_type: KeyType = KeyType.ECDSA
    curve: Optional[EllipticCurve] = None
    webroot_path: Optional[str] = None

    def __post_init__(self):
        if not self.domains or not self.email:
            raise ConfigurationError(
                "Domains and email are required.",
                suggestions=create_error_suggestions("missing_required"),
            )
        if self.key_type is KeyType.ECDSA and self.curve is None:
            object.__setattr__(self, "curve", EllipticCurve.SECP384R1)
        elif self.key_type is KeyType.RSA:
            object.__setattr__(self, "curve", None)
        if self.server_mode is ServerMode.WEBROOT and not self.webroot_path:
            raise ConfigurationError("A webroot path is required for webroot mode.")

    @classmethod
    def from_values(cls, values: Mapping[str, str]) -> "CertbotOptions":
        """
        Build options from resolved string values keyed by pre-set name.

        Case is normalized here. Values irrelevant to the chosen server mode
        or key type are ignored.
        """
        server_mode = _coerce(ServerMode, values.get("SERVER_TYPE", ""), "SERVER_TYPE")
        domains = parse_domains(values.get("DOMAINS", ""))
        email = (values.get("EMAIL") or "").strip()

        if not domains or not email:
            raise ConfigurationError(
                "Domains and email are required.",
                suggestions=create_error_suggestions("missing_required"),
            )

        key_type = _coerce(KeyType, values.get("KEY_TYPE", ""), "KEY_TYPE")
        curve = None
        if key_type is KeyType.ECDSA:
            curve = _coerce(EllipticCurve, values.get("EC_CURVE", ""), "EC_CURVE")

        webroot_path = None
        if server_mode is ServerMode.WEBROOT:
            webroot_path = values.get("WEBROOT_PATH") or None

        return cls(
            server_mode=server_mode,
            domains=domains,
            email=email,
            redirect=parse_flag(values.get("REDIRECT", "")),
            staging=parse_flag(values.get("STAGING", "")),
            key_type=key_type,
            curve=curve,
            webroot_path=webroot_path,
        )

    @property
    def primary_domain(self) -> str:
        return self.domains[0]

    @property
    def uses_web_server(self) -> bool:
        return self.server_mode in (ServerMode.NGINX, ServerMode.APACHE)
