"""Abstract base class for OAuth authentication strategies.

A strategy owns the protocol side of a provider session: building the
authorization redirect, exchanging the callback for an access grant and
attaching that grant to outgoing requests. Providers own one strategy
instance each.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from socialauth.core.exceptions import InvalidGrantError, NotAuthenticatedError
from socialauth.models.oauth import AccessGrant, OAuthConfig, Permission

from ..transport import Body, HttpTransport, Response

logger = logging.getLogger(__name__)

AUTHORIZATION_URL = "authorization_url"
ACCESS_TOKEN_URL = "access_token_url"


class AuthenticationStrategy(ABC):
    """
    Abstract base class for OAuth protocol variants.

    Subclasses implement the authorization URL, the callback exchange and
    the way a grant is attached to a request.
    """

    def __init__(
        self,
        config: OAuthConfig,
        endpoints: Mapping[str, str],
        transport: HttpTransport | None = None,
    ):
        """
        Initialize strategy.

        Args:
            config: Application credentials for the provider
            endpoints: Authorization and token endpoint URLs, keyed by
                AUTHORIZATION_URL / ACCESS_TOKEN_URL
            transport: HTTP transport; a default one is created if omitted
        """
        self.config = config
        self.endpoints = dict(endpoints)
        self.transport = transport or HttpTransport()
        self.scope: str | None = None
        self.permission: Permission | None = None
        self.redirect_uri: str | None = None
        self._access_grant: AccessGrant | None = None

    @property
    def authorization_url(self) -> str:
        return self.endpoints[AUTHORIZATION_URL]

    @property
    def access_token_url(self) -> str:
        return self.endpoints[ACCESS_TOKEN_URL]

    def set_scope(self, scope: str) -> None:
        self.scope = scope

    def set_permission(self, permission: Permission | None) -> None:
        self.permission = permission

    @abstractmethod
    def build_authorization_url(self, return_url: str, extra_params: Mapping[str, str] | None = None) -> str:
        """Authorization endpoint URL the user agent is redirected to."""
        pass

    @abstractmethod
    def verify(self, callback_params: Mapping[str, str]) -> AccessGrant:
        """Exchange callback parameters for an access grant and hold it."""
        pass

    @abstractmethod
    def _attach_credential(
        self, grant: AccessGrant, params: dict[str, str], headers: dict[str, str]
    ) -> None:
        """Add the grant to the outgoing query parameters or headers."""
        pass

    def _check_grant_shape(self, grant: AccessGrant) -> None:
        if not isinstance(grant, AccessGrant):
            raise InvalidGrantError(f"expected AccessGrant, got {type(grant).__name__}", self.config.id)
        if not grant.key:
            raise InvalidGrantError("grant has no access token", self.config.id)
        if grant.provider_id and grant.provider_id != self.config.id:
            raise InvalidGrantError(
                f"grant was issued for '{grant.provider_id}', not '{self.config.id}'",
                self.config.id,
            )

    def set_access_grant(self, grant: AccessGrant) -> None:
        """
        Hold a previously issued grant.

        Raises:
            InvalidGrantError: If the grant does not fit this strategy
        """
        self._check_grant_shape(grant)
        self._access_grant = grant

    def get_access_grant(self) -> AccessGrant | None:
        return self._access_grant

    def execute_authenticated(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Body = None,
    ) -> Response:
        """
        Issue an HTTP request carrying the current grant.

        Raises:
            NotAuthenticatedError: If no grant is held; no request is sent
            TransportError: On network or protocol failure
        """
        grant = self._access_grant
        if grant is None:
            raise NotAuthenticatedError(endpoint=url)

        query = dict(params or {})
        request_headers = dict(headers or {})
        self._attach_credential(grant, query, request_headers)
        return self.transport.request(method, url, params=query, headers=request_headers, body=body)

    def logout(self) -> None:
        self._access_grant = None
