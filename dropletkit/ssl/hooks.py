"""Certbot deploy hook that reloads web servers after renewal."""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..utils.errors import ConfigurationError
from ..utils.templates import TemplateRenderer

logger = logging.getLogger(__name__)

DEPLOY_HOOK_DIR = "/etc/letsencrypt/renewal-hooks/deploy"
DEPLOY_HOOK_NAME = "reload-webserver.sh"
DEFAULT_SERVICES = ("nginx", "apache2")

_SERVICE_NAME = re.compile(r"^[A-Za-z0-9@._-]+$")


@dataclass(frozen=True)
class DeployHook:
    """Services the renewal hook reloads, in order."""

    services: Tuple[str, ...] = DEFAULT_SERVICES

    @classmethod
    def with_extra(cls, extra: Iterable[str] = ()) -> "DeployHook":
        services = list(DEFAULT_SERVICES)
        for name in extra:
            if not _SERVICE_NAME.match(name):
                raise ConfigurationError(f"Invalid service name for deploy hook: {name!r}")
            if name not in services:
                services.append(name)
        return cls(tuple(services))


class DeployHookInstaller:
    """Writes the deploy hook certbot runs after each successful renewal."""

    def __init__(
        self,
        hook_dir: str = DEPLOY_HOOK_DIR,
        renderer: Optional[TemplateRenderer] = None,
        dry_run: bool = False,
    ):
        self.hook_dir = hook_dir
        self.renderer = renderer or TemplateRenderer()
        self.dry_run = dry_run

    @property
    def hook_path(self) -> str:
        return os.path.join(self.hook_dir, DEPLOY_HOOK_NAME)

    def render(self, hook: DeployHook) -> str:
        return self.renderer.render("reload-webserver.sh.j2", services=hook.services)

    def install(self, hook: Optional[DeployHook] = None) -> str:
        """
        Write the hook script and make it executable.

        Returns:
            str: Path to the hook script
        """
        content = self.render(hook or DeployHook())

        if self.dry_run:
            logger.info(f"DRY RUN: would write deploy hook {self.hook_path}")
            return self.hook_path

        os.makedirs(self.hook_dir, exist_ok=True)
        with open(self.hook_path, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(self.hook_path, 0o755)

        logger.info(f"Installed deploy hook at {self.hook_path}")
        return self.hook_path
