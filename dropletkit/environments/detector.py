"""Host environment detection for dropletkit."""

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Dict, Optional

from ..utils.commands import CommandRunner
from ..utils.errors import PreconditionError, create_error_suggestions

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = "/etc/os-release"
SUPPORTED_OS_IDS = ("ubuntu", "debian")


@dataclass(frozen=True)
class HostEnvironment:
    """What the host looked like when the run started."""

    os_id: str
    os_version: str
    has_ufw: bool = False
    has_certbot: bool = False
    has_nginx: bool = False
    has_apache: bool = False

    @property
    def is_supported(self) -> bool:
        return self.os_id in SUPPORTED_OS_IDS

    @property
    def description(self) -> str:
        return f"{self.os_id or 'unknown'} {self.os_version}".strip()


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release(5) KEY=value lines, honouring shell quoting."""
    fields = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


class EnvironmentDetector:
    """Detects OS identity and tool availability on the local host."""

    def __init__(self, runner: CommandRunner, os_release_path: str = OS_RELEASE_PATH):
        self.runner = runner
        self.os_release_path = os_release_path

    def read_os_release(self) -> Dict[str, str]:
        """
        Read the OS release descriptor.

        Raises:
            PreconditionError: If the descriptor is missing
        """
        if not os.path.isfile(self.os_release_path):
            raise PreconditionError(f"Cannot detect OS. {self.os_release_path} missing.")

        with open(self.os_release_path, encoding="utf-8") as f:
            return parse_os_release(f.read())

    def detect(self) -> HostEnvironment:
        """Detect the host environment, warning when the OS is unsupported."""
        release = self.read_os_release()
        available = self.runner.is_available

        host = HostEnvironment(
            os_id=release.get("ID", "").lower(),
            os_version=release.get("VERSION_ID", ""),
            has_ufw=available("ufw"),
            has_certbot=available("certbot"),
            has_nginx=available("nginx"),
            has_apache=available("apache2"),
        )

        if not host.is_supported:
            logger.warning("This tool is tailored for Ubuntu/Debian. Proceeding anyway...")

        logger.debug(f"Detected host: {host}")
        return host


def require_root(euid: Optional[int] = None) -> None:
    """
    Fail unless running with root privileges.

    Raises:
        PreconditionError: If the effective user is not root
    """
    if euid is None:
        euid = os.geteuid()
    if euid != 0:
        raise PreconditionError(
            "Please run as root (sudo).",
            suggestions=create_error_suggestions("not_root"),
        )
