"""Host-level package, service and firewall management."""

from .capabilities import CapabilityInstaller
from .firewall import Firewall
from .packages import PackageInstaller, SnapInstaller
from .services import ServiceManager

__all__ = ["CapabilityInstaller", "Firewall", "PackageInstaller", "ServiceManager", "SnapInstaller"]
