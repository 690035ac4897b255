"""Environment detection and application bootstrap for dropletkit."""

from .detector import EnvironmentDetector, HostEnvironment, require_root

__all__ = ["EnvironmentDetector", "HostEnvironment", "require_root"]
