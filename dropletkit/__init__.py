"""dropletkit - droplet provisioning and certificate automation."""

__version__ = "0.1.0"
__author__ = "dropletkit maintainers"
