"""External command execution for dropletkit."""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a single external command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    skipped: bool = field(default=False, compare=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands with uniform logging, checking and dry-run support."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        """
        Initialize command runner.

        Args:
            verbose: Whether to log every command before running it
            dry_run: Log mutating commands instead of executing them
        """
        self.verbose = verbose
        self.dry_run = dry_run

    def is_available(self, name: str) -> bool:
        """Check whether an executable is on PATH."""
        return shutil.which(name) is not None

    def run(
        self,
        command: Sequence[str],
        check: bool = True,
        capture: bool = True,
        mutable: bool = True,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        redact: Sequence[str] = (),
    ) -> CommandResult:
        """
        Run an external command.

        Args:
            command: Argument vector, never passed through a shell
            check: Raise CommandError when the command exits nonzero
            capture: Capture stdout/stderr instead of passing them through
            mutable: Whether the command changes the host (skipped in dry-run)
            cwd: Working directory
            env: Extra environment variables layered over os.environ
            redact: Substrings masked in logs and error messages

        Returns:
            CommandResult: Exit status and captured output

        Raises:
            CommandError: If check is set and the command fails
        """
        cmd_list = [str(part) for part in command]
        display = self._display(cmd_list, redact)

        if self.dry_run and mutable:
            logger.info(f"DRY RUN: would run: {display}")
            return CommandResult(cmd_list, 0, skipped=True)

        if self.verbose:
            logger.debug(f"Running: {display}")

        result = self._execute(cmd_list, capture=capture, cwd=cwd, env=env)

        if check and not result.ok:
            raise CommandError(
                shlex.split(display),
                result.returncode,
                self._mask(result.stderr, redact),
            )

        return result

    def _execute(
        self,
        command: List[str],
        capture: bool,
        cwd: Optional[str],
        env: Optional[Dict[str, str]],
    ) -> CommandResult:
        exec_env = None
        if env:
            exec_env = os.environ.copy()
            exec_env.update(env)

        try:
            proc = subprocess.run(
                command,
                capture_output=capture,
                text=True,
                check=False,
                cwd=cwd,
                env=exec_env,
            )
        except FileNotFoundError:
            return CommandResult(command, 127, stderr=f"{command[0]}: command not found")

        return CommandResult(command, proc.returncode, proc.stdout or "", proc.stderr or "")

    def _display(self, command: List[str], redact: Sequence[str]) -> str:
        return self._mask(shlex.join(command), redact)

    @staticmethod
    def _mask(text: str, redact: Sequence[str]) -> str:
        for secret in redact:
            if secret:
                text = text.replace(secret, "****")
        return text
