"""Secure secret generation for application environment files."""

import base64
import secrets
from typing import Dict, List

from ..utils.errors import DropletKitError

STRAPI_KEY_BYTES = 16
STRAPI_APP_KEY_COUNT = 4


class SecretGenerator:
    """Generates cryptographically secure secrets for deployments."""

    def generate_base64_key(self, num_bytes: int = STRAPI_KEY_BYTES) -> str:
        """
        Generate a random key encoded as standard base64.

        Args:
            num_bytes: Number of random bytes before encoding

        Returns:
            str: Base64 text, e.g. ``3NuV6u0x3XpEA8lvGouEdg==`` for 16 bytes
        """
        if num_bytes < 16:
            raise DropletKitError("Keys must carry at least 16 random bytes")
        return base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")

    def generate_app_keys(self, count: int = STRAPI_APP_KEY_COUNT) -> List[str]:
        return [self.generate_base64_key() for _ in range(count)]

    def generate_strapi_secrets(self) -> Dict[str, object]:
        """
        Generate every secret a Strapi ``.env`` needs.

        Returns:
            Dict[str, object]: ``app_keys`` is a list, the rest are strings
        """
        return {
            "app_keys": self.generate_app_keys(),
            "api_token_salt": self.generate_base64_key(),
            "admin_jwt_secret": self.generate_base64_key(),
            "transfer_token_salt": self.generate_base64_key(),
            "jwt_secret": self.generate_base64_key(),
        }
