"""Tests for the LinkedIn provider and the shared login state machine."""
import json
from urllib.parse import parse_qs, urlsplit

import pytest

from socialauth.core.exceptions import (
    ExchangeFailedError,
    FetchFailedError,
    InvalidGrantError,
    InvalidInputError,
    MalformedResponseError,
    NotAuthenticatedError,
    StateMismatchError,
    UnsupportedOperationError,
)
from socialauth.models.oauth import AccessGrant, OAuthConfig, Permission
from socialauth.services.oauth.providers import LinkedInProvider
from socialauth.services.oauth.providers.linkedin import (
    CONNECTION_URL,
    MAX_STATUS_LENGTH,
    PROFILE_URL,
    STATUS_BODY,
    UPDATE_STATUS_URL,
)
from socialauth.services.oauth.session import AuthSession, SessionState

TOKEN_URL = "https://www.linkedin.com/uas/oauth2/accessToken"
CALLBACK = "https://app.example.com/auth/linkedin/callback"
FULL_SCOPE = "r_fullprofile r_emailaddress r_network r_contactinfo rw_nus"


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


def _stub_login(mock_api, profile_xml):
    mock_api.add(
        "POST",
        TOKEN_URL,
        content=json.dumps({"access_token": "AQV-linkedin-token-000111", "expires_in": 5184000}),
        headers={"Content-Type": "application/json"},
    )
    mock_api.add("GET", PROFILE_URL, content=profile_xml)


class TestScope:
    def test_default_permission_scope(self, provider):
        assert provider.permission is Permission.DEFAULT
        assert provider.get_scope() == FULL_SCOPE

    def test_all_permission_matches_default(self, provider):
        provider.set_permission(Permission.ALL)
        assert provider.get_scope() == FULL_SCOPE

    def test_scope_is_deterministic(self, provider):
        provider.set_permission(Permission.AUTHENTICATE_ONLY)
        first = provider.get_scope()
        provider.set_permission(Permission.ALL)
        provider.set_permission(Permission.AUTHENTICATE_ONLY)
        assert provider.get_scope() == first

    def test_authenticate_only_appends_plugin_scopes(self, provider):
        provider.set_permission(Permission.AUTHENTICATE_ONLY)
        # linkedin.feed asks for r_network, linkedin.career for r_fullprofile (already present)
        assert provider.get_scope() == "r_fullprofile r_emailaddress r_network"

    def test_custom_permissions_from_config(self, transport):
        config = OAuthConfig(
            id="linkedin",
            client_id="client-123",
            client_secret="secret-xyz",
            custom_permissions="r_basicprofile, r_emailaddress",
        )
        provider = LinkedInProvider(config, transport=transport)
        assert provider.permission is Permission.CUSTOM
        assert provider.get_scope() == "r_basicprofile r_emailaddress r_network r_fullprofile"

    def test_custom_without_permissions_fails_before_url(self, transport, mock_api):
        config = OAuthConfig(id="linkedin", client_id="client-123", client_secret="secret-xyz", custom_permissions="")
        provider = LinkedInProvider(config, transport=transport)

        with pytest.raises(InvalidInputError):
            provider.get_login_redirect_url(CALLBACK)
        assert provider.state is SessionState.UNAUTHENTICATED
        assert mock_api.requests == []


class TestLoginFlow:
    def test_redirect_url_moves_to_awaiting_callback(self, provider):
        assert provider.state is SessionState.UNAUTHENTICATED

        url = provider.get_login_redirect_url(CALLBACK)

        assert url.startswith("https://www.linkedin.com/uas/oauth2/authorization?")
        query = _query(url)
        assert query["client_id"] == ["client-123"]
        assert query["redirect_uri"] == [CALLBACK]
        assert query["scope"] == [FULL_SCOPE]
        assert query["state"] == [provider.session.state_token]
        assert provider.state is SessionState.AWAITING_CALLBACK

    def test_state_token_reused_across_redirects(self, provider):
        first = _query(provider.get_login_redirect_url(CALLBACK))["state"]
        second = _query(provider.get_login_redirect_url(CALLBACK))["state"]
        assert first == second

    def test_verify_with_matching_state(self, provider, mock_api, profile_xml):
        _stub_login(mock_api, profile_xml)
        state = _query(provider.get_login_redirect_url(CALLBACK))["state"][0]

        profile = provider.verify_response({"code": "auth-code", "state": state})

        assert provider.state is SessionState.AUTHENTICATED
        assert profile.id == "Xh7a9K2"
        assert provider.get_access_grant().key == "AQV-linkedin-token-000111"
        assert mock_api.form(0)["redirect_uri"] == CALLBACK
        assert mock_api.requests[1].url.params["oauth2_access_token"] == "AQV-linkedin-token-000111"

    def test_verify_with_absent_state_is_accepted(self, provider, mock_api, profile_xml):
        _stub_login(mock_api, profile_xml)
        provider.get_login_redirect_url(CALLBACK)

        profile = provider.verify_response({"code": "auth-code"})

        assert provider.state is SessionState.AUTHENTICATED
        assert profile.id == "Xh7a9K2"

    def test_mismatched_state_makes_no_network_call(self, provider, mock_api, profile_xml):
        _stub_login(mock_api, profile_xml)
        provider.get_login_redirect_url(CALLBACK)

        with pytest.raises(StateMismatchError):
            provider.verify_response({"code": "auth-code", "state": "forged"})

        assert mock_api.requests == []
        assert provider.state is SessionState.AWAITING_CALLBACK

    def test_verify_before_redirect_is_rejected(self, provider, mock_api):
        with pytest.raises(InvalidInputError):
            provider.verify_response({"code": "auth-code"})
        assert mock_api.requests == []

    def test_failed_exchange_keeps_awaiting_callback(self, provider, mock_api):
        mock_api.add("POST", TOKEN_URL, status_code=400, content='{"error": "invalid_request"}')
        provider.get_login_redirect_url(CALLBACK)

        with pytest.raises(ExchangeFailedError) as exc_info:
            provider.verify_response({"code": "bad"})

        assert exc_info.value.code == "NET200"
        assert provider.state is SessionState.AWAITING_CALLBACK

    def test_redirect_while_authenticated_keeps_grant(self, authenticated_provider, grant):
        authenticated_provider.get_login_redirect_url(CALLBACK)
        assert authenticated_provider.state is SessionState.AUTHENTICATED
        assert authenticated_provider.get_access_grant() == grant

    def test_session_resumes_across_provider_instances(self, linkedin_config, transport, mock_api, profile_xml):
        _stub_login(mock_api, profile_xml)
        first = LinkedInProvider(linkedin_config, transport=transport)
        state = _query(first.get_login_redirect_url(CALLBACK))["state"][0]

        stored = first.session.model_dump_json()
        second = LinkedInProvider(linkedin_config, session=AuthSession.model_validate_json(stored), transport=transport)
        second.verify_response({"code": "auth-code", "state": state})

        assert second.state is SessionState.AUTHENTICATED
        assert mock_api.form(0)["redirect_uri"] == CALLBACK


class TestGrantLifecycle:
    def test_set_then_get_grant(self, provider, grant):
        provider.set_access_grant(grant)
        assert provider.get_access_grant() == grant
        assert provider.state is SessionState.AUTHENTICATED

    def test_logout_clears_grant(self, authenticated_provider):
        authenticated_provider.logout()
        assert authenticated_provider.get_access_grant() is None
        assert authenticated_provider.state is SessionState.UNAUTHENTICATED

    def test_logout_when_unauthenticated_is_noop(self, provider):
        provider.logout()
        assert provider.state is SessionState.UNAUTHENTICATED

    def test_grant_for_other_provider_rejected(self, provider):
        with pytest.raises(InvalidGrantError):
            provider.set_access_grant(AccessGrant(key="tok-abcdefgh1234", provider_id="twitter"))
        assert provider.state is SessionState.UNAUTHENTICATED

    def test_grant_repr_does_not_leak_token(self, grant):
        assert grant.key not in repr(grant)
        assert "AQXd***" in repr(grant)


class TestAuthenticatedOperations:
    @pytest.mark.parametrize(
        "operation",
        [
            lambda p: p.get_user_profile(),
            lambda p: p.get_contact_list(),
            lambda p: p.update_status("hello"),
            lambda p: p.api("https://api.linkedin.com/v1/people/~"),
        ],
    )
    def test_requires_grant_and_sends_nothing(self, provider, mock_api, operation):
        with pytest.raises(NotAuthenticatedError):
            operation(provider)
        assert mock_api.requests == []

    def test_user_profile_is_cached(self, authenticated_provider, mock_api, profile_xml):
        mock_api.add("GET", PROFILE_URL, content=profile_xml)

        first = authenticated_provider.get_user_profile()
        second = authenticated_provider.get_user_profile()

        assert first is second
        assert len(mock_api.requests) == 1
        assert first.email == "ada@example.com"
        assert first.provider_id == "linkedin"

    def test_contacts_drop_entries_without_id(self, authenticated_provider, mock_api, connections_xml):
        mock_api.add("GET", CONNECTION_URL, content=connections_xml)

        contacts = authenticated_provider.get_contact_list()

        assert [c.id for c in contacts] == ["c-001", "private", "c-003"]
        assert contacts[0].profile_url == "http://www.linkedin.com/in/bola"
        assert contacts[2].last_name is None

    def test_contacts_non_2xx_raises_fetch_failed(self, authenticated_provider, mock_api):
        mock_api.add("GET", CONNECTION_URL, status_code=503)
        with pytest.raises(FetchFailedError) as exc_info:
            authenticated_provider.get_contact_list()
        assert exc_info.value.status_code == 503

    def test_contacts_malformed_body_raises(self, authenticated_provider, mock_api):
        mock_api.add("GET", CONNECTION_URL, content="<connections><person>")
        with pytest.raises(MalformedResponseError):
            authenticated_provider.get_contact_list()

    def test_api_returns_error_responses_unchecked(self, authenticated_provider, mock_api, grant):
        mock_api.add("GET", "https://api.linkedin.com/v1/people/~/suggestions", status_code=403, content="<error/>")

        response = authenticated_provider.api("https://api.linkedin.com/v1/people/~/suggestions")

        assert response.status_code == 403
        assert not response.ok
        assert grant.key not in response.url

    def test_upload_image_not_supported(self, authenticated_provider):
        with pytest.raises(UnsupportedOperationError, match="upload_image"):
            authenticated_provider.upload_image("caption", "photo.png", b"\x89PNG")


class TestUpdateStatus:
    def test_body_matches_share_document(self, authenticated_provider, mock_api):
        mock_api.add("POST", UPDATE_STATUS_URL, status_code=201)

        response = authenticated_provider.update_status("Fish & chips")

        request = mock_api.requests[0]
        expected = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            "<share><comment>Fish &amp; chips</comment>"
            "<visibility><code>anyone</code></visibility></share>"
        )
        assert request.content == expected.encode("utf-8")
        assert request.headers["Content-Type"] == "text/xml;charset=UTF-8"
        assert response.status_code == 201
        assert response.truncated is False

    def test_escapes_angle_brackets(self, authenticated_provider, mock_api):
        mock_api.add("POST", UPDATE_STATUS_URL, status_code=201)
        authenticated_provider.update_status("<b>hi</b>")
        assert b"<comment>&lt;b&gt;hi&lt;/b&gt;</comment>" in mock_api.requests[0].content

    def test_exact_max_length_sent_unmodified(self, authenticated_provider, mock_api):
        mock_api.add("POST", UPDATE_STATUS_URL, status_code=201)
        message = "a" * MAX_STATUS_LENGTH

        response = authenticated_provider.update_status(message)

        assert mock_api.requests[0].content == STATUS_BODY.format(message=message).encode("utf-8")
        assert response.truncated is False
        assert response.message == message

    def test_over_max_length_truncated(self, authenticated_provider, mock_api):
        mock_api.add("POST", UPDATE_STATUS_URL, status_code=201)

        response = authenticated_provider.update_status("a" * (MAX_STATUS_LENGTH + 1))

        assert response.ok
        assert response.truncated is True
        assert len(response.message) == MAX_STATUS_LENGTH
        assert mock_api.requests[0].content == STATUS_BODY.format(message="a" * MAX_STATUS_LENGTH).encode("utf-8")

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message_rejected(self, authenticated_provider, mock_api, message):
        with pytest.raises(InvalidInputError):
            authenticated_provider.update_status(message)
        assert mock_api.requests == []

    def test_rejected_share_raises_fetch_failed(self, authenticated_provider, mock_api):
        mock_api.add("POST", UPDATE_STATUS_URL, status_code=401)
        with pytest.raises(FetchFailedError) as exc_info:
            authenticated_provider.update_status("hello")
        assert exc_info.value.status_code == 401
        assert exc_info.value.endpoint == UPDATE_STATUS_URL


def test_endpoint_overrides_from_config(transport, mock_api):
    config = OAuthConfig(
        id="linkedin",
        client_id="client-123",
        client_secret="secret-xyz",
        authorization_url="https://sso.internal.example.com/authorize",
    )
    provider = LinkedInProvider(config, transport=transport)
    assert provider.get_login_redirect_url(CALLBACK).startswith("https://sso.internal.example.com/authorize?")


def test_instances_do_not_share_state(linkedin_config, transport, grant):
    first = LinkedInProvider(linkedin_config, transport=transport)
    second = LinkedInProvider(linkedin_config, transport=transport)

    first.set_access_grant(grant)
    first.set_permission(Permission.AUTHENTICATE_ONLY)

    assert second.get_access_grant() is None
    assert second.permission is Permission.DEFAULT


def test_profile_without_id_fails_login(provider, mock_api):
    mock_api.add("POST", TOKEN_URL, content='{"access_token": "AQV-linkedin-token-000111"}')
    mock_api.add("GET", PROFILE_URL, content="<person><first-name>Ada</first-name></person>")
    provider.get_login_redirect_url(CALLBACK)

    with pytest.raises(MalformedResponseError, match="no user id") as exc_info:
        provider.verify_response({"code": "auth-code"})

    assert exc_info.value.endpoint == PROFILE_URL
    assert provider.state is SessionState.UNAUTHENTICATED
    assert provider.get_access_grant() is None


def test_unauthenticated_profile_error_names_endpoint(provider):
    with pytest.raises(NotAuthenticatedError) as exc_info:
        provider.get_user_profile()
    assert exc_info.value.endpoint == PROFILE_URL


def test_blank_status_error_names_endpoint(authenticated_provider):
    with pytest.raises(InvalidInputError) as exc_info:
        authenticated_provider.update_status("  ")
    assert exc_info.value.endpoint == UPDATE_STATUS_URL
