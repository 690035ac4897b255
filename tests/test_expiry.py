"""Tests for certificate expiry inspection."""

import os
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from dropletkit.ssl.expiry import check_certificate_expiration
from dropletkit.utils.errors import CertificateError


def write_certificate(path, days_valid, names=("example.com", "www.example.com")):
    key = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "example.com")])
    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=90))
        .not_valid_after(now + timedelta(days=days_valid, hours=1))
    )
    if names:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(name) for name in names]),
            critical=False,
        )
    cert = builder.sign(key, hashes.SHA256())
    with open(path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))
    return path


class TestCheckCertificateExpiration:
    """Test expiry classification."""

    def test_valid(self, temp_directory):
        path = write_certificate(os.path.join(temp_directory, "fullchain.pem"), 80)
        info = check_certificate_expiration(path)

        assert info["status"] == "valid"
        assert info["expires_in_days"] == 80
        assert info["domains"] == ["example.com", "www.example.com"]
        assert not info["expired"]

    def test_expiring_soon(self, temp_directory):
        path = write_certificate(os.path.join(temp_directory, "fullchain.pem"), 10)

        assert check_certificate_expiration(path)["status"] == "expiring_soon"

    def test_expired(self, temp_directory):
        path = write_certificate(os.path.join(temp_directory, "fullchain.pem"), -5)
        info = check_certificate_expiration(path)

        assert info["status"] == "expired"
        assert info["expired"]

    def test_without_san(self, temp_directory):
        path = write_certificate(os.path.join(temp_directory, "fullchain.pem"), 80, names=())

        assert check_certificate_expiration(path)["domains"] == []

    def test_missing_file(self, temp_directory):
        with pytest.raises(CertificateError):
            check_certificate_expiration(os.path.join(temp_directory, "missing.pem"))

    def test_garbage_file(self, temp_directory):
        path = os.path.join(temp_directory, "fullchain.pem")
        with open(path, "w") as f:
            f.write("not a certificate")

        with pytest.raises(CertificateError):
            check_certificate_expiration(path)
