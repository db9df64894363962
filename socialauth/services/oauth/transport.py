"""HTTP transport used by authentication strategies.

Thin adapter over ``httpx.Client``: one attempt per call, no retry, and
every httpx failure surfaces as ``TransportError``.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from socialauth.core.config import settings
from socialauth.core.exceptions import FetchFailedError, TransportError
from socialauth.core.logger import redact_url

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})

Body = str | bytes | Mapping[str, str] | None


@dataclass(frozen=True)
class Response:
    """Result of an HTTP call. ``url`` has credential parameters redacted."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes
    url: str
    method: str = "GET"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)


@dataclass(frozen=True)
class StatusUpdateResponse(Response):
    """Response of a status update, with the text that was actually sent."""

    message: str = ""
    truncated: bool = False


@dataclass
class HttpTransport:
    """Performs HTTP requests for a single provider session.

    Pass ``client`` to reuse a configured ``httpx.Client`` (tests inject one
    built on ``httpx.MockTransport``); otherwise the transport creates and
    owns its client.
    """

    client: httpx.Client | None = None
    timeout: float | None = field(default_factory=lambda: settings.HTTP_TIMEOUT)
    _owns_client: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = httpx.Client(timeout=self.timeout, follow_redirects=True)
            self._owns_client = True

    def request(
        self,
        method: str,
        url: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Body = None,
    ) -> Response:
        """
        Issue one HTTP request.

        Args:
            method: GET, POST, PUT or DELETE
            url: Absolute endpoint URL; may already carry a query string
            params: Extra query parameters
            headers: Extra request headers
            body: Raw body (str/bytes) or form fields (mapping)

        Returns:
            Response with status, headers and body

        Raises:
            TransportError: On any network or protocol failure
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise TransportError(f"Unsupported HTTP method: {method}", endpoint=url)

        request_kwargs: dict[str, Any] = {"params": dict(params) if params else None,
                                          "headers": dict(headers) if headers else None}
        if isinstance(body, Mapping):
            request_kwargs["data"] = dict(body)
        elif isinstance(body, str):
            request_kwargs["content"] = body.encode("utf-8")
        elif body is not None:
            request_kwargs["content"] = body

        safe_url = redact_url(url)
        logger.debug(f"HTTP {method} {safe_url}")
        try:
            resp = self.client.request(method, url, **request_kwargs)
        except httpx.HTTPError as e:
            logger.error(f"HTTP {method} {safe_url} failed: {type(e).__name__}")
            raise TransportError(f"Failed to connect to provider: {type(e).__name__}", endpoint=url) from e

        return Response(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            content=resp.content,
            url=redact_url(str(resp.request.url)),
            method=method,
        )

    def close(self) -> None:
        if self._owns_client and self.client is not None:
            self.client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def fetch_checked(call: Callable[..., Response], url: str, description: str, **kwargs: Any) -> Response:
    """
    Run an authenticated call and insist on a 2xx answer.

    Args:
        call: ``api``-shaped callable (provider or plugin support)
        url: Endpoint URL
        description: Action for the error message, e.g. "retrieve the contacts"
        **kwargs: Forwarded to ``call`` (method, params, headers, body)

    Raises:
        FetchFailedError: If the endpoint is unreachable or answers non-2xx
        NotAuthenticatedError: Propagated untouched from ``call``
    """
    try:
        response = call(url, **kwargs)
    except TransportError as e:
        raise FetchFailedError(f"Failed to {description}", endpoint=url) from e
    if not response.ok:
        logger.error(f"Failed to {description} | url={redact_url(url)} status={response.status_code}")
        raise FetchFailedError(f"Failed to {description}", endpoint=url, status_code=response.status_code)
    return response
