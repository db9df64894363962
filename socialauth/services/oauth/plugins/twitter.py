"""Twitter home timeline feed plugin."""
import logging

from socialauth.models.entities import Feed

from ..normalizers import feeds_from_json, parse_json
from ..transport import fetch_checked
from .base import FeedPlugin

logger = logging.getLogger(__name__)

FEED_URL = "https://api.twitter.com/1.1/statuses/home_timeline.json"


class TwitterFeedPlugin(FeedPlugin):
    """Latest statuses from the user's home timeline (at most 20)."""

    identifier = "twitter.feed"

    def get_feeds(self) -> list[Feed]:
        logger.info(f"Getting feeds from URL : {FEED_URL}")
        response = fetch_checked(self.support.api, FEED_URL, "retrieve feeds", params={"count": str(self.MAX_FEEDS)})
        document = parse_json(response.content, endpoint=FEED_URL)
        return feeds_from_json(document, limit=self.MAX_FEEDS, endpoint=FEED_URL)
