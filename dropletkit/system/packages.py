"""System package installation through apt and snap."""

import logging
import os
from typing import Optional

from ..utils.commands import CommandRunner
from ..utils.errors import InstallationError
from .services import ServiceManager

logger = logging.getLogger(__name__)


class PackageInstaller:
    """Installs apt packages, refreshing the package index at most once."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self.index_refreshed = False

    def update_once(self) -> bool:
        """
        Refresh the apt index unless this instance already did.

        Returns:
            bool: True if a refresh ran
        """
        if self.index_refreshed:
            return False
        self.runner.run(["apt-get", "update", "-y"], capture=False)
        self.index_refreshed = True
        return True

    def upgrade(self) -> None:
        """Refresh the index and upgrade every installed package."""
        self.update_once()
        self.runner.run(["apt-get", "upgrade", "-y"], capture=False)

    def install(self, *packages: str) -> None:
        """Install one or more apt packages."""
        if not self.runner.is_available("apt-get"):
            raise InstallationError(
                f"Cannot install {' '.join(packages)}: apt-get not found",
                suggestions=["Install the packages manually on non-Debian systems"],
            )
        self.update_once()
        logger.info(f"Installing {' '.join(packages)}...")
        self.runner.run(["apt-get", "install", "-y", *packages], capture=False)


class SnapInstaller:
    """Installs classic snaps, bootstrapping snapd through apt when needed."""

    def __init__(self, runner: CommandRunner, packages: PackageInstaller, services: Optional[ServiceManager] = None):
        self.runner = runner
        self.packages = packages
        self.services = services

    def ensure_snapd(self) -> None:
        if self.runner.is_available("snap"):
            return
        logger.info("snapd not found. Installing snapd...")
        self.packages.install("snapd")
        if self.services is not None:
            self.services.enable_if_present("snapd.socket")

    def install_classic(self, name: str, link_to: Optional[str] = None) -> None:
        """
        Install a classic-confinement snap on top of a fresh core snap.

        Args:
            name: Snap name
            link_to: Optional path to symlink /snap/bin/<name> at
        """
        self.ensure_snapd()
        logger.info(f"Installing {name} via snap...")
        self.runner.run(["snap", "install", "core"], check=False)
        self.runner.run(["snap", "refresh", "core"])
        self.runner.run(["snap", "install", "--classic", name], capture=False)

        if link_to and not self.runner.dry_run:
            target = f"/snap/bin/{name}"
            if os.path.lexists(link_to):
                os.remove(link_to)
            os.symlink(target, link_to)
