"""OAuth 2.0 authorization code flow with bearer-token requests."""
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

from pydantic import ValidationError

from socialauth.core.exceptions import ExchangeFailedError, TransportError
from socialauth.models.oauth import AccessGrant, OAuthConfig
from socialauth.utils.dates import parse_int

from ..transport import HttpTransport, Response
from .base import AuthenticationStrategy

logger = logging.getLogger(__name__)

# Token response fields mapped onto AccessGrant attributes
_GRANT_FIELDS = {"access_token", "refresh_token", "token_type", "expires_in", "expires"}


class OAuth2Strategy(AuthenticationStrategy):
    """
    OAuth 2.0 authorization code flow.

    The access token is sent either as a query parameter (when
    ``access_token_param`` is given, e.g. LinkedIn's ``oauth2_access_token``)
    or as an ``Authorization: Bearer`` header.
    """

    def __init__(
        self,
        config: OAuthConfig,
        endpoints: Mapping[str, str],
        transport: HttpTransport | None = None,
        access_token_param: str | None = None,
    ):
        super().__init__(config, endpoints, transport)
        self.access_token_param = access_token_param

    def build_authorization_url(self, return_url: str, extra_params: Mapping[str, str] | None = None) -> str:
        """
        Generate authorization URL for OAuth flow.

        Args:
            return_url: Callback URL the provider redirects back to
            extra_params: Additional query parameters (e.g. ``state``)

        Returns:
            Full authorization URL with query parameters
        """
        self.redirect_uri = return_url
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": return_url,
        }
        if self.scope:
            params["scope"] = self.scope
        if extra_params:
            params.update(extra_params)

        separator = "&" if "?" in self.authorization_url else "?"
        return f"{self.authorization_url}{separator}{urlencode(params)}"

    def verify(self, callback_params: Mapping[str, str]) -> AccessGrant:
        """
        Exchange the authorization code from the callback for an access grant.

        Args:
            callback_params: Query parameters received on the callback

        Returns:
            The new access grant, also held by this strategy

        Raises:
            ExchangeFailedError: If the provider denied access, the exchange
                request failed, or the response holds no access token
        """
        code = callback_params.get("code")
        if not code:
            error = callback_params.get("error")
            reason = callback_params.get("error_description") or error or "no authorization code in callback"
            logger.warning(f"Authorization not granted | provider={self.config.id} error={error}")
            raise ExchangeFailedError(
                f"Authorization was not granted: {reason}",
                endpoint=self.authorization_url,
                details={"error": error} if error else None,
            )

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri or "",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        # Log sanitized exchange metadata (no secrets)
        code_hash = abs(hash(code))
        logger.info(
            f"Token exchange attempt | "
            f"provider={self.config.id} "
            f"code_hash={code_hash} "
            f"client_id={self.config.client_id} "
            f"redirect_uri={self.redirect_uri}"
        )

        try:
            response = self.transport.request(
                "POST",
                self.access_token_url,
                headers={"Accept": "application/json"},
                body=data,
            )
        except TransportError as e:
            logger.error(f"Token exchange request failed | code_hash={code_hash}")
            raise ExchangeFailedError("Failed to connect to OAuth provider", endpoint=self.access_token_url) from e

        if not response.ok:
            logger.error(
                f"Token exchange failed | "
                f"code_hash={code_hash} "
                f"status={response.status_code}"
            )
            raise ExchangeFailedError(
                f"Token exchange failed: {response.status_code}",
                endpoint=self.access_token_url,
                status_code=response.status_code,
            )

        payload = self._parse_token_response(response)
        access_token = payload.get("access_token")
        if not access_token:
            raise ExchangeFailedError(
                "No access token in response",
                endpoint=self.access_token_url,
                status_code=response.status_code,
            )

        try:
            grant = AccessGrant(
                key=str(access_token),
                token_type=str(payload.get("token_type") or "Bearer"),
                refresh_token=payload.get("refresh_token"),
                expires_in=parse_int(str(payload.get("expires_in", payload.get("expires", "")))),
                provider_id=self.config.id,
                permission=self.permission,
                attributes={k: v for k, v in payload.items() if k not in _GRANT_FIELDS},
            )
        except ValidationError as e:
            logger.error(f"Token response rejected | code_hash={code_hash} fields={sorted(payload)}")
            raise ExchangeFailedError(
                "Token response is not a valid grant",
                endpoint=self.access_token_url,
                status_code=response.status_code,
            ) from e
        self._access_grant = grant
        logger.info(f"Token exchange SUCCESS | code_hash={code_hash} grant={grant!r}")
        return grant

    def _parse_token_response(self, response: Response) -> dict[str, Any]:
        """Token endpoints answer JSON; some legacy ones answer form-encoded."""
        try:
            payload = response.json()
        except ValueError:
            payload = dict(parse_qsl(response.text))
            if not payload:
                raise ExchangeFailedError(
                    "Token response could not be parsed",
                    endpoint=self.access_token_url,
                    status_code=response.status_code,
                ) from None
            return payload

        if not isinstance(payload, dict):
            raise ExchangeFailedError(
                "Token response is not an object",
                endpoint=self.access_token_url,
                status_code=response.status_code,
            )
        return payload

    def _attach_credential(self, grant: AccessGrant, params: dict[str, str], headers: dict[str, str]) -> None:
        if self.access_token_param:
            params[self.access_token_param] = grant.key
        else:
            headers["Authorization"] = f"Bearer {grant.key}"
