"""systemd service control."""

import logging

from ..utils.commands import CommandRunner

logger = logging.getLogger(__name__)


class ServiceManager:
    """Thin wrapper over systemctl."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def has_unit(self, unit: str) -> bool:
        """Check whether systemd knows a unit file for ``unit``."""
        name = unit if "." in unit else f"{unit}.service"
        result = self.runner.run(["systemctl", "list-unit-files", name], check=False, mutable=False)
        return any(line.split()[0] == name for line in result.stdout.splitlines() if line.strip())

    def enable_if_present(self, unit: str) -> bool:
        """
        Enable and start a unit when its unit file exists, best-effort.

        Returns:
            bool: True if the unit was enabled
        """
        if not self.has_unit(unit):
            logger.debug(f"No unit file for {unit}; not enabling")
            return False
        result = self.runner.run(["systemctl", "enable", "--now", unit], check=False)
        if not result.ok:
            logger.warning(f"Could not enable {unit}: {result.stderr.strip()}")
        return result.ok

    def start(self, unit: str) -> None:
        self.runner.run(["systemctl", "start", unit])

    def restart(self, unit: str) -> None:
        self.runner.run(["systemctl", "restart", unit])
