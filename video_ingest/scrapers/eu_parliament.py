"""European Parliament multimedia centre scraper"""

import re
from typing import List, Optional

from .base_scraper import BaseScraper
from .page_driver import ExtractionError
from ..models import CandidateRef, RawDetail, NO_DOWNLOAD
from ..utils import get_logger

logger = get_logger(__name__)

BASE_URL = "https://multimedia.europarl.europa.eu"
SEARCH_URL = "https://multimedia.europarl.europa.eu/en/search?tab=videos&category=27&page=1"

SELECTORS = {
    "video_item": "div.media-item-card_mediaItemCard__rrO3C",
    "item_link": "a",
    # Duration is only shown on the search page
    "item_duration": "div.media-item-card_mediaItemCard__info__qWdCB p",
    "title": "h1.content-title_heading__Umnug div",
    "description": "div.content-summary_html_raw_content__5bz2F.content-summary_not_compact___yCfw",
    "personalities": "a.tag_tag__ZWglu",
    "published_date": 'span:has-text("Event date:")',
    # Tab that has to be opened before the download list is rendered
    "download_tab": 'a:has-text("Download")',
    "download_link": "div.downloads-tab-content_downloadlist__button__vPzY_ a",
    "reference": 'span:has-text("Reference:")',
}


def format_person_name(raw: str) -> str:
    """Turn "METSOLA, Roberta (EPP)" into "Roberta Metsola" """
    text = re.sub(r"\(.*?\)", "", raw).strip()
    parts = text.split(",")
    if len(parts) < 2:
        return text
    surname = parts[0].strip().capitalize()
    given_name = parts[1].strip().capitalize()
    return f"{given_name} {surname}"


class EUParliamentScraper(BaseScraper):
    """
    Scraper for the European Parliament video search.

    Ordering: lexicographic id, highest first. The final id is the
    "Reference:" label on the detail page, so it may differ from the
    listing id.
    """

    name = "eu_parliament"
    content_provider = "EU Parliament"
    date_format = "%d-%m-%Y"

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """Collect cards from the search page, with their durations"""
        self.driver.navigate(SEARCH_URL, ready_signal=SELECTORS["video_item"], timeout_ms=self.timeout_ms)
        items = self.driver.extract_items(
            SELECTORS["video_item"],
            {
                "href": (SELECTORS["item_link"], "href"),
                "duration": (SELECTORS["item_duration"], None),
            },
        )

        candidates = []
        for item in items[:limit]:
            href = item.get("href") or ""
            if href and not href.startswith("http"):
                href = BASE_URL + href
            parts = href.split("_")
            source_id = parts[-1] if len(parts) > 1 else ""
            if not source_id:
                continue
            candidates.append(CandidateRef(
                source_id=source_id,
                detail_url=href,
                fields={"duration": item.get("duration") or ""},
            ))

        candidates.sort(key=lambda c: c.source_id, reverse=True)
        logger.info(f"Found {len(candidates)} videos: {', '.join(c.source_id for c in candidates)}")
        return candidates

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """Read title, people and the download link from the detail page"""
        self.driver.navigate(candidate.detail_url, timeout_ms=self.timeout_ms)
        try:
            self.driver.wait_for(SELECTORS["title"], timeout_ms=self.timeout_ms)
        except ExtractionError:
            logger.warning(f"Title did not render on {candidate.detail_url}")

        published = self.driver.extract(SELECTORS["published_date"])
        if published:
            published = published.replace("Event date:", "").strip()

        # People tags also link to topics; keep only person pages
        people = self.driver.extract_items(
            SELECTORS["personalities"],
            {"name": (None, None), "href": (None, "href")},
        )
        personalities = [
            format_person_name(p["name"])
            for p in people
            if p.get("name") and "/person/" in (p.get("href") or "")
        ]

        return RawDetail(
            source_id=self._reference(candidate),
            title=self.driver.extract(SELECTORS["title"]),
            published_date=published,
            description=self.driver.extract(SELECTORS["description"]) or "",
            personalities=personalities,
            download_url=self._download_url(),
        )

    def _download_url(self) -> str:
        """Open the download tab and read the first file link"""
        try:
            self.driver.click(SELECTORS["download_tab"], timeout_ms=10000)
            self.driver.wait_for(SELECTORS["download_link"], timeout_ms=10000)
        except ExtractionError as e:
            logger.debug(f"Download tab not available: {e}")
        return self.driver.extract(SELECTORS["download_link"], attribute="href") or NO_DOWNLOAD

    def _reference(self, candidate: CandidateRef) -> str:
        reference = self.driver.extract(SELECTORS["reference"])
        if reference:
            reference = reference.replace("Reference:", "").strip()
        if not reference:
            logger.warning(f"Reference not found on {candidate.detail_url}, using listing id")
            return candidate.source_id
        return reference
