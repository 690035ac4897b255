"""Certbot invocation for obtaining and renewing certificates."""

import logging
import os
from dataclasses import dataclass, field
from typing import List

from ..utils.commands import CommandRunner
from ..utils.errors import ConfigurationError, PreconditionError, create_error_suggestions
from .options import RSA_KEY_SIZE, CertbotOptions, KeyType, ServerMode

logger = logging.getLogger(__name__)

LETSENCRYPT_DIR = "/etc/letsencrypt"
LETSENCRYPT_LOG = "/var/log/letsencrypt/letsencrypt.log"


@dataclass
class ActionResult:
    """Outcome of a certbot action."""

    success: bool
    detail: str
    command: List[str] = field(default_factory=list)


def domain_args(domains) -> List[str]:
    """Expand domains into repeated ``-d`` arguments."""
    args = []
    for domain in domains:
        args.extend(["-d", domain])
    return args


class CertbotClient:
    """Builds and runs certbot commands from CertbotOptions."""

    def __init__(self, runner: CommandRunner, binary: str = "certbot"):
        self.runner = runner
        self.binary = binary

    def common_args(self, options: CertbotOptions) -> List[str]:
        """Arguments shared by every issuance mode."""
        args = ["--agree-tos", "-m", options.email, "--no-eff-email", "--non-interactive"]

        if options.staging:
            args.append("--staging")

        if options.key_type is KeyType.ECDSA:
            args.extend(["--key-type", "ecdsa", "--elliptic-curve", options.curve.value])
        else:
            args.extend(["--key-type", "rsa", "--rsa-key-size", str(RSA_KEY_SIZE)])

        return args

    def build_command(self, options: CertbotOptions) -> List[str]:
        """
        Build the single certbot invocation for the configured server mode.

        Raises:
            ConfigurationError: If the server mode is not recognized
        """
        builders = {
            ServerMode.NGINX: self._server_plugin_command,
            ServerMode.APACHE: self._server_plugin_command,
            ServerMode.WEBROOT: self._webroot_command,
            ServerMode.STANDALONE: self._standalone_command,
        }

        builder = builders.get(options.server_mode)
        if builder is None:
            raise ConfigurationError(f"Unknown SERVER_TYPE: {options.server_mode}")

        return builder(options)

    def _server_plugin_command(self, options: CertbotOptions) -> List[str]:
        cmd = [self.binary, f"--{options.server_mode.value}"]
        cmd.extend(domain_args(options.domains))
        cmd.extend(self.common_args(options))
        if options.redirect:
            cmd.append("--redirect")
        return cmd

    def _webroot_command(self, options: CertbotOptions) -> List[str]:
        cmd = [self.binary, "certonly", "--webroot", "-w", options.webroot_path]
        cmd.extend(domain_args(options.domains))
        cmd.extend(self.common_args(options))
        return cmd

    def _standalone_command(self, options: CertbotOptions) -> List[str]:
        # Port 80 must be free; certbot reports the bind failure itself.
        cmd = [self.binary, "certonly", "--standalone", "--preferred-challenges", "http"]
        cmd.extend(domain_args(options.domains))
        cmd.extend(self.common_args(options))
        return cmd

    def check_preconditions(self, options: CertbotOptions) -> None:
        """
        Verify host state the chosen mode depends on.

        Raises:
            PreconditionError: If the webroot directory is missing
        """
        if options.server_mode is ServerMode.WEBROOT and not os.path.isdir(options.webroot_path):
            raise PreconditionError(
                f"Webroot path not found: {options.webroot_path}",
                suggestions=create_error_suggestions("webroot_missing", path=options.webroot_path),
            )

    def obtain(self, options: CertbotOptions) -> ActionResult:
        """
        Request a certificate with exactly one certbot invocation.

        Returns:
            ActionResult: Whether certbot succeeded
        """
        cmd = self.build_command(options)
        self.check_preconditions(options)

        logger.info(f"Requesting certificate for: {' '.join(options.domains)}")
        result = self.runner.run(cmd, check=False, capture=False)

        if result.ok:
            return ActionResult(True, "Certificate request complete.", cmd)
        return ActionResult(False, f"certbot exited with status {result.returncode}", cmd)

    def renew_dry_run(self) -> ActionResult:
        """Exercise the renewal path without touching live certificates."""
        cmd = [self.binary, "renew", "--dry-run"]
        logger.info("Testing renewal (dry-run)...")
        result = self.runner.run(cmd, check=False, capture=False)

        if result.ok:
            return ActionResult(True, "Dry-run renewal succeeded.", cmd)
        return ActionResult(
            False,
            f"Dry-run renewal reported issues. Check logs at {LETSENCRYPT_LOG}",
            cmd,
        )

    @staticmethod
    def live_dir(domain: str) -> str:
        return os.path.join(LETSENCRYPT_DIR, "live", domain)
