"""Tests for host environment detection."""

import logging
import os

import pytest
from conftest import RecordingRunner

from dropletkit.environments.detector import EnvironmentDetector, parse_os_release, require_root
from dropletkit.utils.errors import PreconditionError


class TestParseOsRelease:
    """Test os-release parsing."""

    def test_quoted_and_bare_values(self):
        fields = parse_os_release('ID=debian\nVERSION_ID="12"\nPRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\n')

        assert fields["ID"] == "debian"
        assert fields["VERSION_ID"] == "12"
        assert fields["PRETTY_NAME"] == "Debian GNU/Linux 12 (bookworm)"

    def test_ignores_comments_and_blank_lines(self):
        assert parse_os_release("# comment\n\nID=ubuntu\n") == {"ID": "ubuntu"}


class TestEnvironmentDetector:
    """Test detection of OS identity and tools."""

    def test_detect_ubuntu(self, ubuntu_os_release):
        runner = RecordingRunner(available={"apt-get", "ufw"})
        host = EnvironmentDetector(runner, os_release_path=ubuntu_os_release).detect()

        assert host.os_id == "ubuntu"
        assert host.os_version == "22.04"
        assert host.is_supported
        assert host.has_ufw
        assert not host.has_certbot

    def test_missing_os_release(self, temp_directory):
        detector = EnvironmentDetector(RecordingRunner(), os_release_path=os.path.join(temp_directory, "nope"))

        with pytest.raises(PreconditionError) as exc_info:
            detector.detect()

        assert exc_info.value.message.startswith("Cannot detect OS.")

    def test_unsupported_os_warns_and_continues(self, temp_directory, caplog):
        path = os.path.join(temp_directory, "os-release")
        with open(path, "w") as f:
            f.write("ID=fedora\nVERSION_ID=40\n")

        with caplog.at_level(logging.WARNING):
            host = EnvironmentDetector(RecordingRunner(), os_release_path=path).detect()

        assert not host.is_supported
        assert "tailored for Ubuntu/Debian" in caplog.text


class TestRequireRoot:
    """Test the privilege check."""

    def test_root_passes(self):
        require_root(euid=0)

    def test_non_root_fails(self):
        with pytest.raises(PreconditionError) as exc_info:
            require_root(euid=1000)

        assert exc_info.value.message == "Please run as root (sudo)."
