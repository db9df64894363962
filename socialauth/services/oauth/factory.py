"""Factory function for creating providers from environment settings."""
import logging

from socialauth.core.config import BaseAppSettings, get_settings
from socialauth.core.exceptions import InvalidInputError
from socialauth.models.oauth import OAuthConfig

from .providers import AuthProvider
from .registry import create_provider
from .session import AuthSession
from .transport import HttpTransport

logger = logging.getLogger(__name__)


def config_from_settings(provider_id: str, settings: BaseAppSettings | None = None) -> OAuthConfig:
    """
    Build an OAuthConfig from ``<PROVIDER>_*`` settings.

    Raises:
        InvalidInputError: If the client id or secret is not configured
    """
    settings = settings or get_settings()
    prefix = provider_id.upper()
    client_id = getattr(settings, f"{prefix}_CLIENT_ID", None)
    client_secret = getattr(settings, f"{prefix}_CLIENT_SECRET", None)
    if not client_id or not client_secret:
        logger.warning(f"{provider_id} OAuth not configured (missing client ID/secret)")
        raise InvalidInputError(
            f"{provider_id} OAuth credentials are not configured",
            details={"missing": [f"{prefix}_CLIENT_ID", f"{prefix}_CLIENT_SECRET"]},
        )

    return OAuthConfig(
        id=provider_id,
        client_id=client_id,
        client_secret=client_secret,
        authorization_url=getattr(settings, f"{prefix}_AUTHORIZATION_URL", None),
        access_token_url=getattr(settings, f"{prefix}_ACCESS_TOKEN_URL", None),
        custom_permissions=getattr(settings, f"{prefix}_CUSTOM_PERMISSIONS", None),
        registered_plugins=tuple(getattr(settings, f"{prefix}_PLUGINS", None) or ()),
        save_raw_response=settings.SAVE_RAW_RESPONSE,
    )


def create_provider_from_settings(
    provider_id: str,
    settings: BaseAppSettings | None = None,
    session: AuthSession | None = None,
    transport: HttpTransport | None = None,
) -> AuthProvider:
    """
    Factory function to create a configured provider.

    Args:
        provider_id: Registered provider identifier (e.g., "linkedin")
        settings: Settings to read; the process settings by default
        session: Session record to resume
        transport: HTTP transport to use

    Returns:
        Configured AuthProvider instance
    """
    config = config_from_settings(provider_id, settings)
    provider = create_provider(config, session=session, transport=transport)
    logger.info(f"{provider_id} provider enabled")
    return provider
