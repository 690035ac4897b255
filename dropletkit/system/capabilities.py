"""Idempotent installation of everything the certificate workflow needs."""

import logging
from typing import List, Optional

from ..environments.detector import HostEnvironment
from ..ssl.options import CertbotOptions, ServerMode
from ..utils.commands import CommandRunner
from ..utils.errors import DropletKitError, InstallationError
from .firewall import Firewall
from .packages import PackageInstaller, SnapInstaller
from .services import ServiceManager

logger = logging.getLogger(__name__)

# server mode -> (binary, apt package, systemd unit)
WEB_SERVERS = {
    ServerMode.NGINX: ("nginx", "nginx", "nginx"),
    ServerMode.APACHE: ("apache2", "apache2", "apache2"),
}

# binary -> HostEnvironment flag
HOST_FLAGS = {
    "certbot": "has_certbot",
    "nginx": "has_nginx",
    "apache2": "has_apache",
    "ufw": "has_ufw",
}

CERTBOT_LINK = "/usr/bin/certbot"


class CapabilityInstaller:
    """Checks each prerequisite and installs only what is missing."""

    def __init__(
        self,
        runner: CommandRunner,
        packages: Optional[PackageInstaller] = None,
        services: Optional[ServiceManager] = None,
        firewall: Optional[Firewall] = None,
    ):
        self.runner = runner
        self.packages = packages or PackageInstaller(runner)
        self.services = services or ServiceManager(runner)
        self.snaps = SnapInstaller(runner, self.packages, self.services)
        self.firewall = firewall or Firewall(runner)

    def ensure_all(self, options: CertbotOptions, host: Optional[HostEnvironment] = None) -> List[str]:
        """
        Ensure certbot, the chosen web server and firewall rules.

        Args:
            options: The certificate request being prepared for
            host: Detected host, used for the first presence checks

        Returns:
            List[str]: Capabilities that had to be installed
        """
        logger.info("Installing prerequisites...")
        installed = []

        if self.ensure_certbot(present=self._detected(host, "certbot")):
            installed.append("certbot")

        if options.server_mode in WEB_SERVERS:
            binary = WEB_SERVERS[options.server_mode][0]
            if self.ensure_web_server(options.server_mode, present=self._detected(host, binary)):
                installed.append(binary)

        if self._detected(host, "ufw") is False:
            logger.debug("ufw not installed, skipping firewall rules")
            return installed

        self.firewall.allow_web(nginx_profile=options.server_mode is ServerMode.NGINX)
        return installed

    @staticmethod
    def _detected(host: Optional[HostEnvironment], binary: str) -> Optional[bool]:
        if host is None:
            return None
        return getattr(host, HOST_FLAGS[binary])

    def ensure_certbot(self, present: Optional[bool] = None) -> bool:
        """
        Install certbot from snap, falling back once to apt.

        Args:
            present: Known presence of certbot; probed on PATH when None

        Returns:
            bool: True if certbot had to be installed
        """
        if present is None:
            present = self.runner.is_available("certbot")
        if present:
            return False

        try:
            self.snaps.install_classic("certbot", link_to=CERTBOT_LINK)
        except (DropletKitError, OSError) as e:
            logger.warning(f"Snap install of certbot failed ({e}). Falling back to apt install of certbot...")
            try:
                self.packages.install("certbot")
            except DropletKitError as fallback_error:
                raise InstallationError(
                    "Could not install certbot via snap or apt",
                    details=fallback_error.details or fallback_error.message,
                    suggestions=["Install certbot manually and re-run"],
                ) from fallback_error

        return True

    def ensure_web_server(self, server_mode: ServerMode, present: Optional[bool] = None) -> bool:
        """
        Install the web server the mode integrates with, if missing.

        Returns:
            bool: True if the web server had to be installed
        """
        if server_mode not in WEB_SERVERS:
            return False

        binary, package, unit = WEB_SERVERS[server_mode]
        if present is None:
            present = self.runner.is_available(binary)
        if present:
            return False

        logger.info(f"Installing {package}...")
        try:
            self.packages.install(package)
        except DropletKitError as e:
            raise InstallationError(f"Could not install {package}", details=e.details or e.message) from e
        self.services.enable_if_present(unit)
        return True
