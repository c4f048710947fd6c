"""EU Commission audiovisual service scraper"""

from typing import List, Optional

from .base_scraper import BaseScraper
from ..models import CandidateRef, RawDetail
from ..utils import get_logger

logger = get_logger(__name__)

BASE_URL = "https://audiovisual.ec.europa.eu"
SEARCH_URL = (
    "https://audiovisual.ec.europa.eu/en/search"
    "?mediatype=VIDEO&categories=VideoNews&sort=score&direction=desc"
)

SELECTORS = {
    "search_results": "section.avs-file a.ecl-link",
    "detail_title": "h1.details-main-title.ng-binding",
    "detail_fields": "div.avs-media-details p",
    "detail_description": "p[ng-bind-html*='video.summary']",
    "detail_personalities": "p.ecl-paragraph.ecl-paragraph--m.ng-scope[ng-if*='video.personalities'] a.ecl-link.ng-binding",
    "detail_download_link": "#downloadlink",
}


def _numeric_suffix(source_id: str) -> int:
    """Recency key: ids look like I-123456, higher is newer"""
    try:
        return int(source_id.rsplit("-", 1)[-1])
    except ValueError:
        return -1


class EUCommissionScraper(BaseScraper):
    """
    Scraper for the EU Commission video news search.

    Ordering: the newest `limit` ids by numeric suffix, processed oldest
    first so stored rows follow publication order.
    """

    name = "eu_commission"
    content_provider = "EU Commission"
    date_format = "%d/%m/%Y"

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """Collect detail links from the search results"""
        self.driver.navigate(SEARCH_URL, ready_signal=SELECTORS["search_results"], timeout_ms=self.timeout_ms)
        hrefs = self.driver.extract_all(SELECTORS["search_results"], attribute="href")

        candidates = []
        for href in hrefs:
            if not href.startswith("http"):
                href = BASE_URL + href
            source_id = href.rstrip("/").split("/")[-1]
            if source_id:
                candidates.append(CandidateRef(source_id=source_id, detail_url=href))

        candidates.sort(key=lambda c: _numeric_suffix(c.source_id), reverse=True)
        newest = candidates[:limit]
        newest.reverse()
        return newest

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """Read the labelled fields of a video detail page"""
        self.driver.navigate(
            candidate.detail_url,
            ready_signal=SELECTORS["detail_title"],
            timeout_ms=self.timeout_ms,
        )

        download_url = self.driver.extract(SELECTORS["detail_download_link"], attribute="href")
        if not download_url:
            logger.warning(f"No download link on {candidate.detail_url}")
            return None

        labelled = self.driver.extract_all(SELECTORS["detail_fields"])

        return RawDetail(
            title=self.driver.extract(SELECTORS["detail_title"]),
            published_date=self._labelled_value(labelled, "Date:"),
            duration=self._labelled_value(labelled, "Duration:"),
            description=self.driver.extract(SELECTORS["detail_description"]) or "",
            personalities=self.driver.extract_all(SELECTORS["detail_personalities"]),
            download_url=download_url,
        )

    @staticmethod
    def _labelled_value(paragraphs: List[str], label: str) -> Optional[str]:
        """Value following a "Label:" prefix in the details box"""
        for text in paragraphs:
            if label in text:
                return text.split(label)[-1].strip()
        return None
