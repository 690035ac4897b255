"""Secret generation for dropletkit deployments."""

from .generator import SecretGenerator

__all__ = ["SecretGenerator"]
