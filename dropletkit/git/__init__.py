"""Git operations for dropletkit."""

from .operations import GitOperationError, GitOperations, github_https_url

__all__ = ["GitOperationError", "GitOperations", "github_https_url"]
