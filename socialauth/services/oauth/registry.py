"""Provider registry: selects an AuthProvider implementation by provider id."""
import logging

from socialauth.core.exceptions import InvalidInputError
from socialauth.models.oauth import OAuthConfig

from .providers import AuthProvider, LinkedInProvider
from .session import AuthSession
from .transport import HttpTransport

logger = logging.getLogger(__name__)

_provider_registry: dict[str, type[AuthProvider]] = {
    "linkedin": LinkedInProvider,
}


def register_provider(provider_id: str, provider_cls: type[AuthProvider]) -> None:
    """
    Register a provider implementation.

    Args:
        provider_id: Provider identifier (e.g., "linkedin")
        provider_cls: AuthProvider subclass
    """
    _provider_registry[provider_id] = provider_cls
    logger.info(f"Registered identity provider: {provider_id}")


def get_provider_class(provider_id: str) -> type[AuthProvider]:
    """
    Get registered provider implementation.

    Raises:
        InvalidInputError: If provider not registered
    """
    if provider_id not in _provider_registry:
        raise InvalidInputError(
            f"Identity provider '{provider_id}' not registered",
            details={"registered": sorted(_provider_registry)},
        )
    return _provider_registry[provider_id]


def get_provider_ids() -> list[str]:
    return list(_provider_registry)


def create_provider(
    config: OAuthConfig,
    session: AuthSession | None = None,
    transport: HttpTransport | None = None,
) -> AuthProvider:
    """Instantiate the provider registered under ``config.id``."""
    provider_cls = get_provider_class(config.id)
    return provider_cls(config, session=session, transport=transport)
