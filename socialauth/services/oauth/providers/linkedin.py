"""LinkedIn OAuth 2.0 provider (REST API v1, XML responses)."""
import logging
from collections.abc import Mapping
from xml.sax.saxutils import escape

from socialauth.models.entities import Contact, Profile

from ..normalizers import contacts_from_xml, parse_xml, profile_from_xml
from ..strategies import ACCESS_TOKEN_URL, AUTHORIZATION_URL, OAuth2Strategy
from ..transport import HttpTransport, StatusUpdateResponse, fetch_checked
from .base import AuthProvider

logger = logging.getLogger(__name__)

PROFILE_URL = (
    "https://api.linkedin.com/v1/people/~:(id,first-name,last-name,languages,date-of-birth,"
    "picture-url,email-address,location:(name),phone-numbers,main-address)"
)
CONNECTION_URL = (
    "https://api.linkedin.com/v1/people/~/connections:"
    "(id,first-name,last-name,public-profile-url,picture-url)"
)
UPDATE_STATUS_URL = "https://api.linkedin.com/v1/people/~/shares"
STATUS_BODY = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    "<share><comment>{message}</comment><visibility><code>anyone</code></visibility></share>"
)
MAX_STATUS_LENGTH = 700


class LinkedInProvider(AuthProvider):
    """LinkedIn OAuth 2.0 implementation."""

    @property
    def default_endpoints(self) -> Mapping[str, str]:
        return {
            AUTHORIZATION_URL: "https://www.linkedin.com/uas/oauth2/authorization",
            ACCESS_TOKEN_URL: "https://www.linkedin.com/uas/oauth2/accessToken",
        }

    @property
    def authenticate_only_scopes(self) -> tuple[str, ...]:
        return ("r_fullprofile", "r_emailaddress")

    @property
    def all_scopes(self) -> tuple[str, ...]:
        return ("r_fullprofile", "r_emailaddress", "r_network", "r_contactinfo", "rw_nus")

    @property
    def profile_url(self) -> str:
        return PROFILE_URL

    @property
    def builtin_plugins(self) -> tuple[str, ...]:
        return ("linkedin.feed", "linkedin.career")

    def _create_strategy(self, endpoints: Mapping[str, str], transport: HttpTransport | None) -> OAuth2Strategy:
        # LinkedIn v1 expects the token as a query parameter, not a bearer header
        return OAuth2Strategy(self.config, endpoints, transport, access_token_param="oauth2_access_token")

    def _fetch_profile(self) -> Profile:
        response = fetch_checked(self.api, self.profile_url, "retrieve the user profile")
        root = parse_xml(response.content, endpoint=self.profile_url)
        profile = profile_from_xml(root, provider_id=self.provider_id, save_raw=self.config.save_raw_response)
        logger.debug(f"User Profile : id={profile.id} provider={self.provider_id}")
        return profile

    def get_contact_list(self) -> list[Contact]:
        """Connections of the user, in the order LinkedIn returns them.

        Connections without an id (private profiles) are left out.
        """
        logger.info(f"Fetching contacts from {CONNECTION_URL}")
        response = fetch_checked(self.api, CONNECTION_URL, "retrieve the contacts")
        root = parse_xml(response.content, endpoint=CONNECTION_URL)
        contacts = contacts_from_xml(root, save_raw=self.config.save_raw_response)
        if not contacts:
            logger.debug(f"No connections were obtained from : {CONNECTION_URL}")
        return contacts

    def update_status(self, message: str) -> StatusUpdateResponse:
        """
        Share a status message.

        Messages over 700 characters are truncated rather than rejected;
        the returned response reports ``truncated`` and the text sent.

        Raises:
            NotAuthenticatedError: If the session is not authenticated
            InvalidInputError: If the message is blank
            FetchFailedError: If LinkedIn cannot be reached or rejects the share
        """
        self.session.require_grant(endpoint=UPDATE_STATUS_URL)
        text, truncated = self._prepare_status_message(message, MAX_STATUS_LENGTH, endpoint=UPDATE_STATUS_URL)
        body = STATUS_BODY.format(message=escape(text))

        logger.info(f"Updating status ({len(text)} chars) on {UPDATE_STATUS_URL}")
        response = fetch_checked(
            self.api,
            UPDATE_STATUS_URL,
            "update status",
            method="POST",
            headers={"Content-Type": "text/xml;charset=UTF-8"},
            body=body,
        )
        logger.debug(f"Status Updated and return status code is : {response.status_code}")
        return StatusUpdateResponse(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
            url=response.url,
            method=response.method,
            message=text,
            truncated=truncated,
        )
