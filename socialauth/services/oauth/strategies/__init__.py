"""OAuth authentication strategies module."""
from .base import ACCESS_TOKEN_URL, AUTHORIZATION_URL, AuthenticationStrategy
from .oauth2 import OAuth2Strategy

__all__ = ["AuthenticationStrategy", "OAuth2Strategy", "AUTHORIZATION_URL", "ACCESS_TOKEN_URL"]
