"""End-to-end certificate provisioning workflow."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..environments.detector import EnvironmentDetector, HostEnvironment, require_root
from ..system.capabilities import CapabilityInstaller
from ..utils.commands import CommandRunner
from ..utils.errors import CertificateError, create_error_suggestions
from ..utils.templates import TemplateRenderer
from .certbot import LETSENCRYPT_LOG, ActionResult, CertbotClient
from .expiry import check_certificate_expiration
from .hooks import DeployHook, DeployHookInstaller
from .options import CertbotOptions
from .resolver import InputResolver, Prompter

logger = logging.getLogger(__name__)


@dataclass
class WorkflowReport:
    """Everything the summary needs after a successful run."""

    options: CertbotOptions
    host: HostEnvironment
    issuance: ActionResult
    renewal: ActionResult
    hook_path: str
    installed: List[str] = field(default_factory=list)
    expiry: Optional[Dict[str, Any]] = None

    @property
    def warnings(self) -> List[str]:
        warnings = []
        if not self.host.is_supported:
            warnings.append(f"Unsupported OS: {self.host.description}")
        if not self.renewal.success:
            warnings.append(self.renewal.detail)
        return warnings


class CertificateWorkflow:
    """Resolves inputs, prepares the host, obtains a certificate and wires renewal."""

    def __init__(
        self,
        runner: CommandRunner,
        preset: Mapping[str, str],
        prompter: Optional[Prompter] = None,
        hook_services: Sequence[str] = (),
        detector: Optional[EnvironmentDetector] = None,
        installer: Optional[CapabilityInstaller] = None,
        client: Optional[CertbotClient] = None,
        hook_installer: Optional[DeployHookInstaller] = None,
        euid: Optional[int] = None,
    ):
        """
        Initialize the workflow.

        Args:
            runner: Command runner shared by every step
            preset: Pre-set option values (environment, CLI options, config file)
            prompter: How to ask for values missing from ``preset``
            hook_services: Services reloaded by the deploy hook besides nginx/apache2
            detector: Host detector
            installer: Capability installer
            client: Certbot client
            hook_installer: Deploy hook writer
            euid: Effective uid override, mainly for tests
        """
        self.runner = runner
        self.preset = preset
        self.prompter = prompter
        self.hook = DeployHook.with_extra(hook_services)
        self.detector = detector or EnvironmentDetector(runner)
        self.installer = installer or CapabilityInstaller(runner)
        self.client = client or CertbotClient(runner)
        self.hook_installer = hook_installer or DeployHookInstaller(dry_run=runner.dry_run)
        self.euid = euid

    def run(self) -> WorkflowReport:
        """
        Execute the workflow top to bottom.

        Returns:
            WorkflowReport: Outcome of every step

        Raises:
            DropletKitError: On the first hard failure
        """
        if not self.runner.dry_run:
            require_root(self.euid)
        host = self.detector.detect()

        options = InputResolver(self.preset, self.prompter).resolve()
        self.client.check_preconditions(options)

        installed = self.installer.ensure_all(options, host)

        issuance = self.client.obtain(options)
        if not issuance.success:
            raise CertificateError(
                f"Certificate request failed: {issuance.detail}",
                details=f"See {LETSENCRYPT_LOG}",
                suggestions=create_error_suggestions("certbot_failed"),
            )
        logger.info(issuance.detail)

        hook_path = self.hook_installer.install(self.hook)

        renewal = self.client.renew_dry_run()
        if renewal.success:
            logger.info(renewal.detail)
        else:
            logger.warning(renewal.detail)

        return WorkflowReport(
            options=options,
            host=host,
            issuance=issuance,
            renewal=renewal,
            hook_path=hook_path,
            installed=installed,
            expiry=self._read_expiry(options),
        )

    def _read_expiry(self, options: CertbotOptions) -> Optional[Dict[str, Any]]:
        if self.runner.dry_run:
            return None
        cert_path = os.path.join(self.client.live_dir(options.primary_domain), "fullchain.pem")
        try:
            return check_certificate_expiration(cert_path)
        except CertificateError as e:
            logger.debug(f"Skipping expiry check: {e.message}")
            return None


def render_summary(report: WorkflowReport, renderer: Optional[TemplateRenderer] = None) -> str:
    """Render the operator-facing summary printed after a successful run."""
    renderer = renderer or TemplateRenderer()
    return renderer.render(
        "certbot-summary.txt.j2",
        options=report.options,
        report=report,
        log_path=LETSENCRYPT_LOG,
    )
