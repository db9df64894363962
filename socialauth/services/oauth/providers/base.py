"""Abstract base class for identity providers.

Implements the login state machine shared by every provider:

    UNAUTHENTICATED --get_login_redirect_url--> AWAITING_CALLBACK
    AWAITING_CALLBACK --verify_response--> AUTHENTICATED
    any --set_access_grant--> AUTHENTICATED
    any --logout--> UNAUTHENTICATED

Subclasses supply endpoints, permission tables, the strategy flavour and the
provider-specific fetches.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TypeVar

from socialauth.core.exceptions import (
    InvalidInputError,
    MalformedResponseError,
    PluginUnavailableError,
    UnsupportedOperationError,
)
from socialauth.core.logger import redact_url
from socialauth.models.entities import Contact, Profile
from socialauth.models.oauth import AccessGrant, OAuthConfig, Permission

from ..plugins import Plugin, ProviderSupport, resolve_plugins
from ..session import STATE_PARAM, AuthSession, SessionState
from ..strategies import ACCESS_TOKEN_URL, AUTHORIZATION_URL, AuthenticationStrategy
from ..transport import Body, HttpTransport, Response, StatusUpdateResponse

logger = logging.getLogger(__name__)

PluginT = TypeVar("PluginT", bound=Plugin)


class AuthProvider(ABC):
    """
    Abstract base class for identity providers.

    One instance serves one user session. Instances share no mutable state,
    so distinct sessions may run concurrently; a single instance must not be
    used from several threads at once.
    """

    def __init__(
        self,
        config: OAuthConfig,
        session: AuthSession | None = None,
        transport: HttpTransport | None = None,
    ):
        """
        Initialize provider.

        Args:
            config: Application credentials and overrides
            session: Session record to resume; a fresh one is created if omitted
            transport: HTTP transport shared with the strategy

        Raises:
            InvalidGrantError: If the resumed session holds a grant for
                another provider
        """
        self.config = config
        self.session = session or AuthSession()
        self.permission = Permission.CUSTOM if config.custom_permissions is not None else Permission.DEFAULT

        endpoints = {
            AUTHORIZATION_URL: config.authorization_url or self.default_endpoints[AUTHORIZATION_URL],
            ACCESS_TOKEN_URL: config.access_token_url or self.default_endpoints[ACCESS_TOKEN_URL],
        }
        self._strategy = self._create_strategy(endpoints, transport)
        self._strategy.set_permission(self.permission)
        if self.session.return_url:
            self._strategy.redirect_uri = self.session.return_url
        if self.session.access_grant is not None:
            self._strategy.set_access_grant(self.session.access_grant)

        support = ProviderSupport(self.api, config.id, config.save_raw_response)
        self.plugins, self.plugin_failures = resolve_plugins(self.get_plugins_list(), support)

    # ------------------------------------------------------------------
    # Provider specifics
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def default_endpoints(self) -> Mapping[str, str]:
        """Authorization and token endpoints used when config has no override."""
        pass

    @property
    @abstractmethod
    def authenticate_only_scopes(self) -> tuple[str, ...]:
        """Minimal scope tokens for Permission.AUTHENTICATE_ONLY."""
        pass

    @property
    @abstractmethod
    def all_scopes(self) -> tuple[str, ...]:
        """Scope tokens for Permission.DEFAULT and Permission.ALL."""
        pass

    @property
    @abstractmethod
    def profile_url(self) -> str:
        """Endpoint the authenticated user's profile is read from."""
        pass

    @property
    def builtin_plugins(self) -> tuple[str, ...]:
        return ()

    @abstractmethod
    def _create_strategy(
        self, endpoints: Mapping[str, str], transport: HttpTransport | None
    ) -> AuthenticationStrategy:
        pass

    @abstractmethod
    def _fetch_profile(self) -> Profile:
        """Fetch and normalize the authenticated user's profile."""
        pass

    @abstractmethod
    def get_contact_list(self) -> list[Contact]:
        """
        Fetch the user's connections.

        Raises:
            NotAuthenticatedError: If the session is not authenticated
            FetchFailedError: If the endpoint cannot be reached
            MalformedResponseError: If the response cannot be parsed
        """
        pass

    @abstractmethod
    def update_status(self, message: str) -> StatusUpdateResponse:
        """Post a status message for the user."""
        pass

    def upload_image(self, message: str, filename: str, data: bytes) -> Response:
        logger.warning(f"upload_image is not implemented for {self.provider_id}")
        raise UnsupportedOperationError("upload_image", self.provider_id)

    # ------------------------------------------------------------------
    # Login flow
    # ------------------------------------------------------------------

    @property
    def provider_id(self) -> str:
        return self.config.id

    @property
    def state(self) -> SessionState:
        return self.session.status

    def get_scope(self) -> str:
        """
        Space-joined scope: permission tokens, then plugin tokens not yet present.

        A plugin token already requested is not repeated, so the provider
        never sees duplicate scope entries.

        Raises:
            InvalidInputError: If CUSTOM permission is requested without any
                custom permission configured
        """
        if self.permission is Permission.AUTHENTICATE_ONLY:
            tokens = list(self.authenticate_only_scopes)
        elif self.permission is Permission.CUSTOM:
            tokens = [t.strip() for t in (self.config.custom_permissions or "").split(",") if t.strip()]
            if not tokens:
                raise InvalidInputError(
                    "Custom permission requested but no custom permissions are configured",
                    details={"provider_id": self.provider_id},
                )
        else:
            tokens = list(self.all_scopes)

        for plugin in self.plugins.values():
            for scope in plugin.scopes:
                if scope not in tokens:
                    tokens.append(scope)
        return " ".join(tokens)

    def set_permission(self, permission: Permission) -> None:
        """Takes effect at the next get_login_redirect_url; an existing grant keeps its privileges."""
        logger.debug(f"Permission requested : {permission.value}")
        self.permission = permission
        self._strategy.set_permission(permission)

    def get_login_redirect_url(self, return_url: str) -> str:
        """
        Build the URL to send the user to for authentication.

        Args:
            return_url: Callback URL on the host application

        Returns:
            Provider authorization URL carrying the anti-forgery state
        """
        scope = self.get_scope()
        state_token = self.session.begin_login(return_url)
        self._strategy.set_scope(scope)
        url = self._strategy.build_authorization_url(return_url, {STATE_PARAM: state_token})
        logger.info(f"Login redirect issued | provider={self.provider_id} scope={scope}")
        return url

    def verify_response(self, callback_params: Mapping[str, str]) -> Profile:
        """
        Complete the login with the parameters the provider sent back.

        Args:
            callback_params: Query parameters of the callback request

        Returns:
            The authenticated user's profile

        Raises:
            InvalidInputError: If no login redirect was issued for this session
            StateMismatchError: If the callback state differs from ours; the
                exchange is not attempted
            ExchangeFailedError: If the grant exchange fails
            MalformedResponseError: If the profile cannot be parsed or has no
                user id; the session is logged out
        """
        self.session.check_callback(callback_params, endpoint=self._strategy.authorization_url)
        logger.info(f"Verifying the authentication response from {self.provider_id}")
        grant = self._strategy.verify(callback_params)
        self.session.authenticate(grant)
        try:
            return self._load_profile()
        except MalformedResponseError:
            # Grant is dropped when the profile cannot be identified
            self.logout()
            raise

    def get_user_profile(self) -> Profile:
        """Cached profile, fetched on first use after authentication."""
        self.session.require_grant(endpoint=self.profile_url)
        if self.session.profile is None:
            return self._load_profile()
        return self.session.profile

    def _load_profile(self) -> Profile:
        logger.debug("Obtaining user profile")
        profile = self._fetch_profile()
        if not profile.id:
            raise MalformedResponseError("Profile response carries no user id", endpoint=self.profile_url)
        self.session.profile = profile
        return profile

    def get_access_grant(self) -> AccessGrant | None:
        return self.session.access_grant

    def set_access_grant(self, grant: AccessGrant) -> None:
        """
        Resume a session from a stored grant.

        Raises:
            InvalidGrantError: If the grant does not fit this provider
        """
        self._strategy.set_access_grant(grant)
        self.session.authenticate(grant)
        logger.info(f"Access grant restored | provider={self.provider_id} grant={grant!r}")

    def logout(self) -> None:
        self.session.reset()
        self._strategy.logout()
        logger.info(f"Logged out | provider={self.provider_id}")

    # ------------------------------------------------------------------
    # Authenticated requests
    # ------------------------------------------------------------------

    def api(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Body = None,
    ) -> Response:
        """
        Make an authenticated HTTP request to any provider endpoint.

        The response is returned as-is, whatever its status.

        Raises:
            NotAuthenticatedError: If the session is not authenticated
            TransportError: On network or protocol failure
        """
        self.session.require_grant(endpoint=url)
        logger.debug(f"Calling URL : {redact_url(url)}")
        return self._strategy.execute_authenticated(url, method, params, headers, body)

    def _prepare_status_message(
        self, message: str, max_length: int, endpoint: str | None = None
    ) -> tuple[str, bool]:
        """Reject blank messages; cut overlong ones to ``max_length``."""
        if message is None or not message.strip():
            raise InvalidInputError("Status cannot be blank", endpoint=endpoint)
        if len(message) > max_length:
            logger.warning(
                f"Message length can not be greater than {max_length} characters. "
                f"Truncating it to {max_length} chars"
            )
            return message[:max_length], True
        return message, False

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def get_plugins_list(self) -> list[str]:
        """Built-in plugin identifiers followed by the ones registered in config."""
        return [*self.builtin_plugins, *self.config.registered_plugins]

    def is_supported_plugin(self, capability: type[Plugin]) -> bool:
        return any(isinstance(plugin, capability) for plugin in self.plugins.values())

    def get_plugin(self, capability: type[PluginT]) -> PluginT:
        """
        First loaded plugin implementing ``capability`` (e.g. FeedPlugin).

        Raises:
            PluginUnavailableError: If no loaded plugin provides it
        """
        for plugin in self.plugins.values():
            if isinstance(plugin, capability):
                return plugin
        raise PluginUnavailableError(
            capability.__name__, f"no plugin with this capability is loaded for {self.provider_id}"
        )
