"""Error handling utilities for dropletkit."""

import subprocess
import sys
import traceback
from typing import Optional

import click
from jinja2 import TemplateError


class DropletKitError(Exception):
    """Base exception for dropletkit errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(DropletKitError):
    """Raised when resolved configuration is invalid or incomplete."""

    pass


class PromptExhaustedError(ConfigurationError):
    """Raised when the operator never gives an acceptable answer."""

    pass


class PreconditionError(DropletKitError):
    """Raised when the host does not satisfy a hard precondition."""

    pass


class CommandError(DropletKitError):
    """Raised when an external command exits with a nonzero status."""

    def __init__(self, command: list, returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command failed with exit code {returncode}: {' '.join(self.command)}",
            details=stderr.strip() or None,
        )


class InstallationError(DropletKitError):
    """Raised when a required capability cannot be installed."""

    pass


class CertificateError(DropletKitError):
    """Raised when certificate issuance fails."""

    pass


class BootstrapError(DropletKitError):
    """Raised when an application bootstrap step fails."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, DropletKitError):
            self._report(error.message, context, error.details, error.suggestions)
        else:
            self._handle_generic_error(error, context)

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Translate exceptions raised outside dropletkit into host-level advice."""
        details = None

        if isinstance(error, TemplateError):
            message = f"Could not render template: {error}"
            suggestions = ["Reinstall dropletkit; its packaged templates may be incomplete"]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error.filename or error}"
            suggestions = create_error_suggestions("not_root")
        elif isinstance(error, FileNotFoundError):
            message = f"File not found: {error.filename or error}"
            suggestions = [
                "Check that the path is correct",
                "Pass the configuration file with --config",
            ]
        elif isinstance(error, subprocess.SubprocessError):
            message = f"External command failed: {error}"
            suggestions = ["Check that the tool is installed and on PATH"]
        elif isinstance(error, OSError):
            message = f"System error: {error.strerror or error}"
            details = error.filename
            suggestions = ["Check free disk space and that parent directories exist"]
        else:
            message = f"{type(error).__name__}: {error}"
            suggestions = []

        self._report(message, context, details, suggestions)

    def _report(
        self,
        message: str,
        context: Optional[str],
        details: Optional[str],
        suggestions: list,
    ) -> None:
        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if details:
            click.echo(f"Details: {details}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information

    Returns:
        list: List of suggestion strings
    """
    suggestions = {
        "not_root": [
            "Re-run the command with sudo",
        ],
        "missing_required": [
            "Export DOMAINS and EMAIL before running",
            "Or answer the prompts instead of leaving them empty",
        ],
        "webroot_missing": [
            f"Create {kwargs.get('path', 'the webroot directory')} or point WEBROOT_PATH at a served directory",
        ],
        "certbot_failed": [
            "Check that DNS for every domain points at this host",
            "Inspect /var/log/letsencrypt/letsencrypt.log",
            "Retry with STAGING=y to avoid rate limits while debugging",
        ],
        "configuration_invalid": [
            "Check YAML syntax in configuration file",
            "Verify all values match the documented choices",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
