"""Tests for error handling system."""

import subprocess
from unittest.mock import patch

from jinja2 import TemplateNotFound

from dropletkit.utils.errors import (
    BootstrapError,
    CertificateError,
    CommandError,
    ConfigurationError,
    DropletKitError,
    ErrorHandler,
    InstallationError,
    PreconditionError,
    PromptExhaustedError,
    create_error_suggestions,
    format_validation_errors,
)


class TestDropletKitError:
    """Test custom error classes."""

    def test_basic(self):
        error = DropletKitError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details is None
        assert error.suggestions == []

    def test_with_details(self):
        error = DropletKitError("Test error", details="Detailed explanation", suggestions=["Try this"])

        assert error.details == "Detailed explanation"
        assert error.suggestions == ["Try this"]

    def test_specific_error_types(self):
        for cls in (ConfigurationError, PreconditionError, InstallationError, CertificateError, BootstrapError):
            assert issubclass(cls, DropletKitError)
        assert issubclass(PromptExhaustedError, ConfigurationError)

    def test_command_error(self):
        error = CommandError(["apt-get", "install", "-y", "nginx"], 100, "E: Unable to locate package\n")

        assert error.message == "Command failed with exit code 100: apt-get install -y nginx"
        assert error.details == "E: Unable to locate package"
        assert error.returncode == 100


class TestErrorHandler:
    """Test error handler functionality."""

    def setup_method(self):
        self.handler = ErrorHandler(verbose=False)
        self.verbose_handler = ErrorHandler(verbose=True)

    def test_handle_dropletkit_error(self):
        error = DropletKitError("Test error message", details="Error details", suggestions=["Suggestion 1"])

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error, "Test context")

        messages = [str(call.args[0]) for call in mock_echo.call_args_list]
        assert messages[0] == "✗ Test error message"
        assert "Context: Test context" in messages
        assert "Details: Error details" in messages
        assert "  • Suggestion 1" in messages
        assert all(call.kwargs.get("err") for call in mock_echo.call_args_list)

    def test_handle_generic_error_file_not_found(self):
        with patch("click.echo") as mock_echo:
            self.handler.handle_error(FileNotFoundError("dropletkit.yml"))

        assert "File not found" in str(mock_echo.call_args_list[0])

    def test_handle_generic_error_permission_denied(self):
        with patch("click.echo") as mock_echo:
            self.handler.handle_error(PermissionError("/etc/letsencrypt"))

        assert "Permission denied" in str(mock_echo.call_args_list[0])

    def test_permission_error_suggests_sudo(self):
        error = PermissionError(13, "Permission denied", "/etc/letsencrypt/renewal-hooks/deploy/reload-webserver.sh")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

        messages = [str(call.args[0]) for call in mock_echo.call_args_list]
        assert messages[0] == "✗ Permission denied: /etc/letsencrypt/renewal-hooks/deploy/reload-webserver.sh"
        assert "  • Re-run the command with sudo" in messages

    def test_os_error_shows_path_as_details(self):
        error = OSError(28, "No space left on device", "/var/www/html/.well-known")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

        messages = [str(call.args[0]) for call in mock_echo.call_args_list]
        assert messages[0] == "✗ System error: No space left on device"
        assert "Details: /var/www/html/.well-known" in messages

    def test_subprocess_error_suggests_checking_tool(self):
        with patch("click.echo") as mock_echo:
            self.handler.handle_error(subprocess.TimeoutExpired(["certbot", "renew"], 30))

        messages = [str(call.args[0]) for call in mock_echo.call_args_list]
        assert messages[0].startswith("✗ External command failed:")
        assert "  • Check that the tool is installed and on PATH" in messages

    def test_template_error(self):
        with patch("click.echo") as mock_echo:
            self.handler.handle_error(TemplateNotFound("nginx-site.conf.j2"))

        assert "Could not render template: nginx-site.conf.j2" in str(mock_echo.call_args_list[0])

    def test_handle_error_with_verbose(self):
        with patch("click.echo"):
            with patch("traceback.print_exc") as mock_traceback:
                self.verbose_handler.handle_error(DropletKitError("Test error"))

        mock_traceback.assert_called_once()

    def test_exit_with_error(self):
        with patch("click.echo"):
            with patch("sys.exit") as mock_exit:
                self.handler.exit_with_error(DropletKitError("Fatal error"), exit_code=2)

        mock_exit.assert_called_once_with(2)


class TestErrorUtilities:
    """Test error utility functions."""

    def test_webroot_suggestion_names_path(self):
        suggestions = create_error_suggestions("webroot_missing", path="/srv/www")

        assert any("/srv/www" in suggestion for suggestion in suggestions)

    def test_certbot_failed_suggestions(self):
        suggestions = create_error_suggestions("certbot_failed")

        assert any("STAGING" in suggestion for suggestion in suggestions)

    def test_unknown_suggestions(self):
        assert create_error_suggestions("unknown_error_type") == []

    def test_format_validation_errors(self):
        assert format_validation_errors([]) == "No validation errors"
        assert format_validation_errors(["a"]) == "Validation error: a"

        result = format_validation_errors(["a", "b"])
        assert result.startswith("Validation errors:")
        assert "  2. b" in result
