"""Utilities for dropletkit."""

from .commands import CommandResult, CommandRunner
from .logging import setup_logging
from .templates import TemplateRenderer

__all__ = ["CommandResult", "CommandRunner", "TemplateRenderer", "setup_logging"]
