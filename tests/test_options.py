"""Tests for certificate request options."""

import pytest

from dropletkit.ssl.options import (
    CertbotOptions,
    EllipticCurve,
    KeyType,
    ServerMode,
    parse_domains,
    parse_flag,
)
from dropletkit.utils.errors import ConfigurationError


def values(**overrides):
    base = {
        "SERVER_TYPE": "nginx",
        "DOMAINS": "example.com",
        "EMAIL": "admin@example.com",
        "REDIRECT": "y",
        "STAGING": "n",
        "KEY_TYPE": "ecdsa",
        "EC_CURVE": "secp384r1",
    }
    base.update(overrides)
    return base


class TestParsing:
    """Test domain and flag parsing."""

    def test_parse_domains_mixed_separators(self):
        assert parse_domains("a.com, b.com c.com") == ("a.com", "b.com", "c.com")

    def test_parse_domains_preserves_order(self):
        assert parse_domains("www.example.com,example.com") == ("www.example.com", "example.com")

    def test_parse_domains_empty(self):
        assert parse_domains("") == ()
        assert parse_domains(" , ,  ") == ()

    @pytest.mark.parametrize("value", ["y", "Y", " y\r"])
    def test_parse_flag_truthy(self, value):
        assert parse_flag(value) is True

    @pytest.mark.parametrize("value", ["n", "N", "no", "", "yes", "true", "1"])
    def test_parse_flag_falsy(self, value):
        assert parse_flag(value) is False


class TestCertbotOptions:
    """Test building immutable options from resolved values."""

    def test_from_values_defaults(self):
        options = CertbotOptions.from_values(values())

        assert options.server_mode is ServerMode.NGINX
        assert options.domains == ("example.com",)
        assert options.primary_domain == "example.com"
        assert options.redirect is True
        assert options.staging is False
        assert options.key_type is KeyType.ECDSA
        assert options.curve is EllipticCurve.SECP384R1
        assert options.webroot_path is None

    def test_from_values_normalizes_case(self):
        options = CertbotOptions.from_values(values(SERVER_TYPE="Apache", KEY_TYPE="ECDSA", EC_CURVE="SECP521R1"))

        assert options.server_mode is ServerMode.APACHE
        assert options.curve is EllipticCurve.SECP521R1

    def test_rsa_has_no_curve(self):
        options = CertbotOptions.from_values(values(KEY_TYPE="rsa", EC_CURVE="secp256r1"))

        assert options.key_type is KeyType.RSA
        assert options.curve is None

    def test_unknown_server_type(self):
        with pytest.raises(ConfigurationError) as exc_info:
            CertbotOptions.from_values(values(SERVER_TYPE="caddy"))

        assert "Unknown SERVER_TYPE: caddy" in str(exc_info.value)

    def test_unknown_key_type(self):
        with pytest.raises(ConfigurationError):
            CertbotOptions.from_values(values(KEY_TYPE="dsa"))

    def test_unknown_curve(self):
        with pytest.raises(ConfigurationError):
            CertbotOptions.from_values(values(EC_CURVE="prime192v1"))

    @pytest.mark.parametrize("field", ["DOMAINS", "EMAIL"])
    def test_missing_required(self, field):
        with pytest.raises(ConfigurationError) as exc_info:
            CertbotOptions.from_values(values(**{field: ""}))

        assert exc_info.value.message == "Domains and email are required."

    def test_webroot_path_only_for_webroot(self):
        nginx = CertbotOptions.from_values(values(WEBROOT_PATH="/srv/www"))
        webroot = CertbotOptions.from_values(values(SERVER_TYPE="webroot", WEBROOT_PATH="/srv/www"))

        assert nginx.webroot_path is None
        assert webroot.webroot_path == "/srv/www"

    def test_webroot_requires_path(self):
        with pytest.raises(ConfigurationError):
            CertbotOptions.from_values(values(SERVER_TYPE="webroot"))

    def test_uses_web_server(self):
        assert CertbotOptions.from_values(values()).uses_web_server
        assert not CertbotOptions.from_values(values(SERVER_TYPE="standalone")).uses_web_server

    def test_options_are_frozen(self):
        options = CertbotOptions.from_values(values())

        with pytest.raises(AttributeError):
            options.email = "other@example.com"
