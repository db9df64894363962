from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, unquote

import httpx
import pytest

os.environ.setdefault("APP_ENV", "test")

from socialauth.models.oauth import AccessGrant, OAuthConfig  # noqa: E402
from socialauth.services.oauth.providers import LinkedInProvider  # noqa: E402
from socialauth.services.oauth.transport import HttpTransport  # noqa: E402


@dataclass
class _Route:
    method: str
    host: str
    path_prefix: str
    status_code: int
    content: bytes
    headers: dict[str, str]
    error: Exception | None = None


@dataclass
class RecordingHandler:
    """``httpx.MockTransport`` handler that records every request.

    Routes match on method, host and path prefix, first registered wins.
    Unmatched requests answer 404 so a missing stub fails loudly.
    """

    routes: list[_Route] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(
        self,
        method: str,
        url: str,
        status_code: int = 200,
        content: str | bytes = b"",
        headers: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> None:
        parsed = httpx.URL(url)
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.routes.append(
            _Route(
                method=method.upper(),
                host=parsed.host,
                path_prefix=unquote(parsed.path),
                status_code=status_code,
                content=content,
                headers=headers or {},
                error=error,
            )
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = unquote(request.url.path)
        for route in self.routes:
            if route.method == request.method and route.host == request.url.host and path.startswith(route.path_prefix):
                if route.error is not None:
                    raise route.error
                return httpx.Response(route.status_code, content=route.content, headers=route.headers)
        return httpx.Response(404, content=b"not stubbed")

    def form(self, index: int = -1) -> dict[str, str]:
        """Form-encoded body of a recorded request."""
        return dict(parse_qsl(self.requests[index].content.decode("utf-8")))


@pytest.fixture
def mock_api() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def transport(mock_api):
    client = httpx.Client(transport=httpx.MockTransport(mock_api))
    transport = HttpTransport(client=client)
    yield transport
    client.close()


@pytest.fixture
def linkedin_config() -> OAuthConfig:
    return OAuthConfig(id="linkedin", client_id="client-123", client_secret="secret-xyz")


@pytest.fixture
def provider(linkedin_config, transport) -> LinkedInProvider:
    return LinkedInProvider(linkedin_config, transport=transport)


@pytest.fixture
def grant() -> AccessGrant:
    return AccessGrant(key="AQXdSP_W41_UPs5ioT_t8HESyODB4FqbkJ8LrV_5mff4gPODzOYR", expires_in=5184000, provider_id="linkedin")


@pytest.fixture
def authenticated_provider(provider, grant) -> LinkedInProvider:
    provider.set_access_grant(grant)
    return provider


PROFILE_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<person>
  <id>Xh7a9K2</id>
  <first-name>Ada</first-name>
  <last-name>Okafor</last-name>
  <date-of-birth>
    <year>1988</year>
    <month>4</month>
    <day>xx</day>
  </date-of-birth>
  <picture-url>https://media.licdn.com/mpr/ada.jpg</picture-url>
  <email-address>ada@example.com</email-address>
  <location>
    <name>Lagos, Nigeria</name>
    <country><code>ng</code></country>
  </location>
  <phone-numbers total="2">
    <phone-number>
      <phone-type>mobile</phone-type>
      <phone-number>+2348000000001</phone-number>
    </phone-number>
    <phone-number>
      <phone-type>work</phone-type>
      <phone-number>+2348000000002</phone-number>
    </phone-number>
  </phone-numbers>
  <main-address>12 Marina Road, Lagos</main-address>
</person>
"""

CONNECTIONS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<connections total="3">
  <person>
    <id>c-001</id>
    <first-name>Bola</first-name>
    <last-name>Ade</last-name>
    <public-profile-url>http://www.linkedin.com/in/bola</public-profile-url>
    <picture-url>https://media.licdn.com/mpr/bola.jpg</picture-url>
  </person>
  <person>
    <id>private</id>
    <first-name>private</first-name>
    <last-name>private</last-name>
  </person>
  <person>
    <first-name>Hidden</first-name>
    <last-name>Person</last-name>
  </person>
  <person>
    <id>c-003</id>
    <first-name>Chidi</first-name>
  </person>
</connections>
"""


@pytest.fixture
def profile_xml() -> str:
    return PROFILE_XML


@pytest.fixture
def connections_xml() -> str:
    return CONNECTIONS_XML
