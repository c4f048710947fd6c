"""YouTube channel scraper (European Central Bank, Greenpeace)"""

from typing import List, Optional
from urllib.parse import urlparse, parse_qs

from .base_scraper import BaseScraper
from .page_driver import ExtractionError
from ..models import CandidateRef, RawDetail
from ..utils import get_logger

logger = get_logger(__name__)

SELECTORS = {
    "cookie_accept": 'button:has-text("Accept")',
    "video_title": "yt-formatted-string#video-title",
    "grid_item": "ytd-rich-grid-media",
    "item_thumbnail": "a#thumbnail",
    "item_duration": "span.ytd-thumbnail-overlay-time-status-renderer",
    "item_relative_date": "#metadata-line span.inline-metadata-item:nth-child(2)",
    "date_published": 'meta[itemprop="datePublished"]',
    "description": "yt-formatted-string#description",
    "player_duration": "span.ytp-time-duration",
}


def video_id_from_url(url: str) -> str:
    """The v= query parameter of a watch URL"""
    if not url or "watch?v=" not in url:
        return ""
    return parse_qs(urlparse(url).query).get("v", [""])[0]


class YouTubeChannelScraper(BaseScraper):
    """
    Scraper for the "Videos" tab of a YouTube channel.

    Ordering: page position (YouTube lists newest first). The watch URL is
    stored as the download URL.
    """

    # Slower than the institutional portals
    default_timeout_ms = 90000

    def __init__(self, driver, channel_url: str, name: str, content_provider: str, timeout_ms: Optional[int] = None):
        super().__init__(driver, timeout_ms=timeout_ms or self.default_timeout_ms)
        self.channel_url = channel_url
        self.name = name
        self.content_provider = content_provider

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """Read video cards from the channel grid"""
        self.driver.navigate(self.channel_url, timeout_ms=self.timeout_ms)
        self._accept_cookies()
        self.driver.wait_for(SELECTORS["video_title"], timeout_ms=self.timeout_ms)

        items = self.driver.extract_items(
            SELECTORS["grid_item"],
            {
                "title": (SELECTORS["video_title"], None),
                "url": (SELECTORS["item_thumbnail"], "href"),
                "duration": (SELECTORS["item_duration"], None),
                "published_date": (SELECTORS["item_relative_date"], None),
            },
        )

        candidates = []
        for item in items[:limit]:
            source_id = video_id_from_url(item.get("url") or "")
            if not source_id:
                continue
            candidates.append(CandidateRef(
                source_id=source_id,
                detail_url=item["url"],
                fields={
                    "title": item.get("title") or "",
                    "duration": item.get("duration") or "",
                    # Relative ("3 days ago"); replaced by the exact date when the watch page has it
                    "published_date": item.get("published_date") or "",
                },
            ))

        logger.info(f"Found {len(candidates)} videos: {', '.join(c.source_id for c in candidates)}")
        return candidates

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """Read exact date, description and duration from the watch page"""
        self.driver.navigate(candidate.detail_url, timeout_ms=self.timeout_ms)

        return RawDetail(
            published_date=self.driver.extract(SELECTORS["date_published"], attribute="content"),
            description=self.driver.extract(SELECTORS["description"]) or "",
            duration=self.driver.extract(SELECTORS["player_duration"]),
            download_url=candidate.detail_url,
        )

    def _accept_cookies(self):
        try:
            self.driver.click(SELECTORS["cookie_accept"], timeout_ms=5000)
            logger.info("Accepted cookies")
        except ExtractionError:
            logger.debug("No cookie prompt found")
