"""LinkedIn feed and career plugins."""
import logging

from socialauth.models.entities import Career, Feed

from ..normalizers import career_from_xml, feeds_from_xml, parse_xml
from ..transport import fetch_checked
from .base import CareerPlugin, FeedPlugin

logger = logging.getLogger(__name__)

FEED_URL = "https://api.linkedin.com/v1/people/~/network/updates"
CAREER_URL = (
    "https://api.linkedin.com/v1/people/~:(id,headline,"
    "positions:(id,title,start-date,end-date,is-current,company:(name)),"
    "educations:(school-name,degree,field-of-study,start-date,end-date))"
)


class LinkedInFeedPlugin(FeedPlugin):
    """Shares posted by the user's network."""

    identifier = "linkedin.feed"
    scopes = ("r_network",)

    def get_feeds(self) -> list[Feed]:
        logger.info(f"Getting feeds from URL : {FEED_URL}")
        response = fetch_checked(
            self.support.api,
            FEED_URL,
            "retrieve feeds",
            params={"type": "SHAR", "count": str(self.MAX_FEEDS)},
        )
        root = parse_xml(response.content, endpoint=FEED_URL)
        feeds = feeds_from_xml(root, limit=self.MAX_FEEDS)
        logger.debug(f"Feeds count :: {len(feeds)}")
        return feeds


class LinkedInCareerPlugin(CareerPlugin):
    """Headline, positions and educations of the user."""

    identifier = "linkedin.career"
    scopes = ("r_fullprofile",)

    def get_career_details(self) -> Career:
        logger.info("Fetching career details")
        response = fetch_checked(self.support.api, CAREER_URL, "retrieve career details")
        return career_from_xml(parse_xml(response.content, endpoint=CAREER_URL))
