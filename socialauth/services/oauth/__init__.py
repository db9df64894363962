"""Social identity OAuth Service Module.

Drives the OAuth authorization handshake against third-party identity
providers and normalizes their profile, contact, feed and career data.

Providers:
- LinkedIn (OAuth 2.0, REST API v1)

Plugins:
- linkedin.feed, linkedin.career, twitter.feed
"""
from .factory import config_from_settings, create_provider_from_settings
from .plugins import (
    CareerPlugin,
    FeedPlugin,
    Plugin,
    ProviderSupport,
    register_plugin,
)
from .providers import (
    AuthProvider,
    LinkedInProvider,
)
from .registry import create_provider, get_provider_class, get_provider_ids, register_provider
from .session import AuthSession, SessionState
from .strategies import AuthenticationStrategy, OAuth2Strategy
from .transport import HttpTransport, Response, StatusUpdateResponse

__all__ = [
    # Providers
    "AuthProvider",
    "LinkedInProvider",
    # Strategies
    "AuthenticationStrategy",
    "OAuth2Strategy",
    # Session
    "AuthSession",
    "SessionState",
    # Transport
    "HttpTransport",
    "Response",
    "StatusUpdateResponse",
    # Plugins
    "Plugin",
    "FeedPlugin",
    "CareerPlugin",
    "ProviderSupport",
    "register_plugin",
    # Registry
    "register_provider",
    "get_provider_class",
    "get_provider_ids",
    "create_provider",
    # Factory
    "config_from_settings",
    "create_provider_from_settings",
]
