"""Read-only inspection of issued certificates."""

import os
from datetime import datetime, timezone
from typing import Any, Dict

from cryptography import x509

from ..utils.errors import CertificateError

EXPIRING_SOON_DAYS = 30


def check_certificate_expiration(cert_path: str) -> Dict[str, Any]:
    """
    Check certificate expiration status.

    Args:
        cert_path: Path to a PEM certificate (or full chain)

    Returns:
        Dict[str, Any]: Expiration information
    """
    if not os.path.exists(cert_path):
        raise CertificateError(f"Certificate file not found: {cert_path}")

    try:
        with open(cert_path, "rb") as f:
            cert = x509.load_pem_x509_certificate(f.read())
    except ValueError as e:
        raise CertificateError(f"Could not parse certificate {cert_path}", details=str(e)) from e

    expires_at = cert.not_valid_after_utc
    expires_in = expires_at - datetime.now(timezone.utc)

    status = "valid"
    if expires_in.days < 0:
        status = "expired"
    elif expires_in.days < EXPIRING_SOON_DAYS:
        status = "expiring_soon"

    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
        names = san.value.get_values_for_type(x509.DNSName)
    except x509.ExtensionNotFound:
        names = []

    return {
        "status": status,
        "domains": names,
        "expires_at": expires_at.isoformat(),
        "expires_in_days": expires_in.days,
        "expired": expires_in.days < 0,
        "expiring_soon": 0 <= expires_in.days < EXPIRING_SOON_DAYS,
    }
