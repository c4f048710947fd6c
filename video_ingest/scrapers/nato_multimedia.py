"""NATO Multimedia portal scraper (requires a login)"""

import random
import time
from typing import List, Optional

from .base_scraper import BaseScraper, AuthenticationError
from .page_driver import ExtractionError
from ..models import CandidateRef, RawDetail, NO_DOWNLOAD
from ..utils import get_logger

logger = get_logger(__name__)

SEARCH_URL = (
    "https://www.natomultimedia.tv/app/search"
    "?s.q=&s.o=date&s.g=1&s.g=2&s.l=&s.df=&s.dt=&s.nr=&s.lm=&s.lmi=&s.lmc=&s%40action=search"
)

SELECTORS = {
    # Login
    "login_button": 'button[data-target="#login"]',
    "login_form": "form#f48",
    "email_field": "input#f49",
    "password_field": "input#f50",
    "submit_button": 'button[name="login@action"]',
    "user_menu": "button#dropdownMenu1",
    # Listing and detail page
    "video_result": "div.media.video.result",
    "result_link": "a",
    "title": "h2.col-md-8",
    "description": "div.col-md-12 div.metaValue",
    "published_date": "div.meta.col-md-4 div.asset-metadata-value",
    "duration": "div.type span",
    "download_dropdown": "button#openDownload",
    "download_link_full_hd": 'a:has-text("Full HD")',
}


class NatoMultimediaScraper(BaseScraper):
    """
    Scraper for the NATO Multimedia search.

    Ordering: page position (the search is sorted by date). Detail pages
    and downloads are only available to a logged-in session.
    """

    name = "nato_multimedia"
    content_provider = "NATO Multimedia"
    date_format = "%d %b. %Y"
    requires_authentication = True

    def __init__(self, driver, username: Optional[str] = None, password: Optional[str] = None, timeout_ms: int = 60000):
        super().__init__(driver, timeout_ms=timeout_ms)
        self.username = username
        self.password = password
        self.authenticated = False

    def authenticate(self) -> None:
        """Log in through the search page login form"""
        if not self.username or not self.password:
            raise AuthenticationError("NATO Multimedia credentials are not configured (NATO_USERNAME/NATO_PASSWORD)")

        self.driver.navigate(SEARCH_URL, timeout_ms=self.timeout_ms)
        self._pause()
        self.driver.click(SELECTORS["login_button"])
        self.driver.wait_for(SELECTORS["login_form"])
        self.driver.fill(SELECTORS["email_field"], self.username)
        self.driver.fill(SELECTORS["password_field"], self.password)
        self._pause()
        self.driver.click(SELECTORS["submit_button"])

        # The user menu only renders for a logged-in session
        self.driver.wait_for(SELECTORS["user_menu"], timeout_ms=self.timeout_ms)
        self.driver.wait_for(SELECTORS["login_form"], state="hidden", timeout_ms=30000)
        self.authenticated = True
        logger.info("Logged in to NATO Multimedia")

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """Collect result links from the date-sorted search"""
        self.driver.navigate(SEARCH_URL, ready_signal=SELECTORS["video_result"], timeout_ms=self.timeout_ms)
        items = self.driver.extract_items(
            SELECTORS["video_result"],
            {"url": (SELECTORS["result_link"], "href")},
        )

        candidates = []
        for item in items:
            url = item.get("url")
            if not url:
                continue
            candidates.append(CandidateRef(source_id=url.rstrip("/").split("/")[-1], detail_url=url))
            if len(candidates) >= limit:
                break
        return candidates

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """Read the metadata block and the full HD download link"""
        self.driver.navigate(candidate.detail_url, ready_signal=SELECTORS["title"], timeout_ms=self.timeout_ms)

        detail = RawDetail(
            title=self.driver.extract(SELECTORS["title"]),
            description=self.driver.extract(SELECTORS["description"]) or "",
            published_date=self.driver.extract(SELECTORS["published_date"]),
            duration=self.driver.extract(SELECTORS["duration"]),
        )

        try:
            self.driver.click(SELECTORS["download_dropdown"], timeout_ms=30000)
            self.driver.wait_for(SELECTORS["download_link_full_hd"], timeout_ms=30000)
            detail.download_url = self.driver.extract(SELECTORS["download_link_full_hd"], attribute="href")
        except ExtractionError as e:
            logger.warning(f"No download link for {candidate.source_id}: {e}")
        detail.download_url = detail.download_url or NO_DOWNLOAD
        return detail

    @staticmethod
    def _pause(low: float = 0.5, high: float = 1.5):
        """Short human-like pause between login steps"""
        time.sleep(random.uniform(low, high))
