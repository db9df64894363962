"""Optional provider capabilities layered on the authenticated-request call.

A plugin never sees the access grant. It receives a ``ProviderSupport``
whose only power is issuing requests through the owning provider.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import ClassVar

from socialauth.models.entities import Career, Feed

from ..transport import Body, Response


class ProviderSupport:
    """Authenticated-request capability handed to plugins."""

    def __init__(self, api: Callable[..., Response], provider_id: str, save_raw_response: bool = False):
        self._api = api
        self.provider_id = provider_id
        self.save_raw_response = save_raw_response

    def api(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Body = None,
    ) -> Response:
        return self._api(url, method=method, params=params, headers=headers, body=body)


class Plugin(ABC):
    """Base class for provider plugins.

    ``identifier`` is the registry key; ``scopes`` are appended to the
    provider's requested scope when the plugin is in its plugin list.
    """

    identifier: ClassVar[str]
    scopes: ClassVar[tuple[str, ...]] = ()

    def __init__(self, support: ProviderSupport):
        self.support = support


class FeedPlugin(Plugin):
    """Reads a bounded page of the user's timeline."""

    MAX_FEEDS: ClassVar[int] = 20

    @abstractmethod
    def get_feeds(self) -> list[Feed]:
        pass


class CareerPlugin(Plugin):
    """Reads the user's professional history."""

    @abstractmethod
    def get_career_details(self) -> Career:
        pass
