"""Identity providers module."""
from .base import AuthProvider
from .linkedin import LinkedInProvider

__all__ = ["AuthProvider", "LinkedInProvider"]
