"""Let's Encrypt certificate automation for dropletkit."""

from .options import CertbotOptions, EllipticCurve, KeyType, ServerMode, parse_domains
from .certbot import ActionResult, CertbotClient
from .hooks import DeployHook, DeployHookInstaller
from .resolver import InputResolver

__all__ = [
    "ActionResult",
    "CertbotClient",
    "CertbotOptions",
    "DeployHook",
    "DeployHookInstaller",
    "EllipticCurve",
    "InputResolver",
    "KeyType",
    "ServerMode",
    "parse_domains",
]
