"""OAuth configuration, permission and access grant models."""
from __future__ import annotations

import datetime as dt
import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from socialauth.core.logger import mask_secret


class Permission(str, enum.Enum):
    """Scope requested from the identity provider during authorization."""

    AUTHENTICATE_ONLY = "authenticate_only"
    DEFAULT = "default"
    ALL = "all"
    CUSTOM = "custom"


class OAuthConfig(BaseModel):
    """Application credentials and per-provider overrides. Immutable."""

    model_config = ConfigDict(frozen=True)

    id: str
    client_id: str
    client_secret: str = Field(..., repr=False)
    authorization_url: str | None = None
    access_token_url: str | None = None
    # Comma-separated scope tokens; selects Permission.CUSTOM when set
    custom_permissions: str | None = None
    registered_plugins: tuple[str, ...] = ()
    save_raw_response: bool = False


class AccessGrant(BaseModel):
    """Credential obtained from a successful OAuth exchange.

    The token fields are excluded from ``repr``/``str``; only a masked
    prefix of ``key`` is shown so a grant can be logged safely.
    """

    key: str = Field(..., repr=False)
    secret: str | None = Field(default=None, repr=False)
    token_type: str = "Bearer"
    refresh_token: str | None = Field(default=None, repr=False)
    expires_in: int | None = None
    issued_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))
    provider_id: str | None = None
    permission: Permission | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    def __repr_args__(self):
        yield "key", mask_secret(self.key)
        yield from super().__repr_args__()

    @property
    def expires_at(self) -> dt.datetime | None:
        if self.expires_in is None:
            return None
        return self.issued_at + dt.timedelta(seconds=self.expires_in)

    def is_expired(self, now: dt.datetime | None = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now or dt.datetime.now(dt.timezone.utc)) >= expires_at
