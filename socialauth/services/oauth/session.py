"""Per-session state for a provider's login flow.

One AuthSession belongs to exactly one provider instance at a time. It is a
pydantic model so a host application can persist it between the redirect
request and the callback request (``model_dump_json`` /
``model_validate_json``) and hand it to a fresh provider.
"""
from __future__ import annotations

import enum
import logging
import secrets
from collections.abc import Mapping

from pydantic import BaseModel, Field

from socialauth.core.exceptions import InvalidInputError, NotAuthenticatedError, StateMismatchError
from socialauth.models.entities import Profile
from socialauth.models.oauth import AccessGrant

logger = logging.getLogger(__name__)

STATE_PARAM = "state"


class SessionState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_CALLBACK = "awaiting_callback"
    AUTHENTICATED = "authenticated"


class AuthSession(BaseModel):
    status: SessionState = SessionState.UNAUTHENTICATED
    state_token: str | None = Field(default=None, repr=False)
    return_url: str | None = None
    access_grant: AccessGrant | None = None
    profile: Profile | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionState.AUTHENTICATED and self.access_grant is not None

    def begin_login(self, return_url: str) -> str:
        """Record the redirect target and return the anti-forgery token.

        The token is generated once per session and reused for later
        redirects. An authenticated session stays authenticated (re-consent).
        """
        if self.state_token is None:
            self.state_token = secrets.token_urlsafe(24)
        self.return_url = return_url
        if self.status is SessionState.UNAUTHENTICATED:
            self.status = SessionState.AWAITING_CALLBACK
        return self.state_token

    def check_callback(self, callback_params: Mapping[str, str], endpoint: str | None = None) -> None:
        """Validate a callback before any exchange is attempted.

        A callback without a state parameter is accepted; some providers omit
        it. A present but different value fails closed.
        """
        if self.status is SessionState.UNAUTHENTICATED:
            raise InvalidInputError(
                "Callback received before a login redirect URL was issued for this session",
                endpoint=endpoint,
            )
        if STATE_PARAM in callback_params:
            if not self.state_token or not secrets.compare_digest(
                str(callback_params[STATE_PARAM]), self.state_token
            ):
                logger.warning("Rejected OAuth callback: state mismatch")
                raise StateMismatchError(endpoint=endpoint)
        else:
            logger.debug("OAuth callback carries no state parameter; skipping anti-forgery check")

    def authenticate(self, grant: AccessGrant) -> None:
        self.access_grant = grant
        self.profile = None
        self.status = SessionState.AUTHENTICATED

    def require_grant(self, endpoint: str | None = None) -> AccessGrant:
        if not self.is_authenticated:
            raise NotAuthenticatedError(endpoint=endpoint)
        return self.access_grant

    def reset(self) -> None:
        self.access_grant = None
        self.profile = None
        self.status = SessionState.UNAUTHENTICATED
