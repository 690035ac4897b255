"""UFW firewall rules."""

import logging
import os
from typing import List

from ..utils.commands import CommandRunner

logger = logging.getLogger(__name__)

UFW_APPLICATIONS_DIR = "/etc/ufw/applications.d"


class Firewall:
    """Opens ports through ufw when it is installed."""

    def __init__(self, runner: CommandRunner, applications_dir: str = UFW_APPLICATIONS_DIR):
        self.runner = runner
        self.applications_dir = applications_dir

    @property
    def available(self) -> bool:
        return self.runner.is_available("ufw")

    def has_application(self, name: str) -> bool:
        """Check for a ufw application profile file such as ``nginx``."""
        return os.path.isfile(os.path.join(self.applications_dir, name))

    def allow(self, rule: str, strict: bool = False) -> bool:
        """
        Allow a port or application profile.

        Args:
            rule: ufw rule such as ``80/tcp`` or ``Nginx Full``
            strict: Raise on failure instead of logging a warning

        Returns:
            bool: True if ufw accepted the rule
        """
        result = self.runner.run(["ufw", "allow", rule], check=strict)
        if not result.ok:
            logger.warning(f"ufw rejected rule {rule!r}: {result.stderr.strip()}")
        return result.ok

    def allow_web(self, nginx_profile: bool = False) -> List[str]:
        """
        Open HTTP and HTTPS, best-effort. Does nothing without ufw.

        Returns:
            List[str]: Rules ufw accepted
        """
        if not self.available:
            return []

        logger.info("Configuring UFW rules...")
        rules = ["80/tcp", "443/tcp"]
        if nginx_profile and self.has_application("nginx"):
            rules.append("Nginx Full")

        return [rule for rule in rules if self.allow(rule)]
