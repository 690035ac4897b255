"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from typing import Dict, Iterable, List, Optional

import pytest

from dropletkit.utils.commands import CommandResult, CommandRunner


class RecordingRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them."""

    def __init__(
        self,
        available: Iterable[str] = (),
        results: Optional[Dict[str, CommandResult]] = None,
        dry_run: bool = False,
    ):
        super().__init__(verbose=False, dry_run=dry_run)
        self.available = set(available)
        self.results = results or {}
        self.commands: List[List[str]] = []

    def is_available(self, name: str) -> bool:
        return name in self.available

    def _execute(self, command, capture, cwd, env):
        self.commands.append(command)
        joined = " ".join(command)
        for prefix, result in self.results.items():
            if joined.startswith(prefix):
                return CommandResult(command, result.returncode, result.stdout, result.stderr)
        return CommandResult(command, 0)

    def ran(self, prefix: str) -> bool:
        return any(" ".join(command).startswith(prefix) for command in self.commands)

    def count(self, prefix: str) -> int:
        return sum(1 for command in self.commands if " ".join(command).startswith(prefix))


def failing(returncode: int = 1, stderr: str = "boom") -> CommandResult:
    return CommandResult([], returncode, stderr=stderr)


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_config():
    """Sample configuration file contents."""
    return {
        "certbot": {
            "server_type": "webroot",
            "domains": ["example.com", "www.example.com"],
            "email": "admin@example.com",
            "redirect": False,
            "staging": True,
            "key_type": "rsa",
            "webroot_path": "/var/www/html",
            "hook_services": ["myapp"],
        },
        "bootstrap": {
            "node_version": "20.5.0",
            "repository": "acme/strapi-site",
            "app_port": 1338,
            "database": {"name": "shop", "user": "shop_user"},
        },
    }


@pytest.fixture
def ubuntu_os_release(temp_directory):
    """Write an Ubuntu os-release file and return its path."""
    path = f"{temp_directory}/os-release"
    with open(path, "w") as f:
        f.write('NAME="Ubuntu"\nID=ubuntu\nVERSION_ID="22.04"\nPRETTY_NAME="Ubuntu 22.04.4 LTS"\n')
    return path
