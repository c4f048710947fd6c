"""Council of Europe video portal scraper (Vimeo-hosted videos)"""

import json
import re
from typing import List, Optional

from .base_scraper import BaseScraper
from ..models import CandidateRef, RawDetail
from ..utils import get_logger, format_seconds

logger = get_logger(__name__)

BASE_URL = "https://www.coe.int/en/web/portal/videos"
VIMEO_PLAYER_URL = "https://player.vimeo.com/video/{vimeo_id}"
VIMEO_CONFIG_PATTERN = r"player\.vimeo\.com/video/{vimeo_id}/config"

SELECTORS = {
    "video_item": ".element.itemCat.clearfix",
    "video_page_link": "h3 a",
    "vimeo_iframe": "iframe",
}


class CouncilOfEuropeScraper(BaseScraper):
    """
    Scraper for the Council of Europe video archive.

    Ordering: page position. The listing carries no stable id, so
    candidates are keyed by page URL and the Vimeo id found on the detail
    page becomes the stored id.
    """

    name = "council_of_europe"
    content_provider = "Council of Europe"
    date_format = "%Y-%m-%d %H:%M:%S"

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """Collect the first video links of the archive page"""
        self.driver.navigate(BASE_URL, ready_signal=SELECTORS["video_item"], timeout_ms=self.timeout_ms)
        items = self.driver.extract_items(
            SELECTORS["video_item"],
            {
                "title": (SELECTORS["video_page_link"], None),
                "url": (SELECTORS["video_page_link"], "href"),
            },
        )

        candidates = []
        for item in items:
            url = item.get("url")
            if not url:
                continue
            candidates.append(CandidateRef(
                source_id=url,
                detail_url=url,
                fields={"title": item.get("title") or ""},
            ))
            if len(candidates) >= limit:
                break
        return candidates

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """Locate the embedded Vimeo player and read its configuration"""
        self.driver.navigate(candidate.detail_url, timeout_ms=self.timeout_ms)

        iframe_src = self.driver.extract(SELECTORS["vimeo_iframe"], attribute="src")
        if not iframe_src:
            logger.warning(f"No Vimeo iframe found for {candidate.detail_url}, skipping")
            return None

        match = re.search(r"video/(\d+)", iframe_src)
        if not match:
            logger.warning(f"Could not extract Vimeo id from {iframe_src}")
            return None
        vimeo_id = match.group(1)

        body = self.driver.await_response_matching(
            VIMEO_CONFIG_PATTERN.format(vimeo_id=vimeo_id),
            timeout_ms=self.timeout_ms,
            navigate_to=VIMEO_PLAYER_URL.format(vimeo_id=vimeo_id),
        )
        detail = RawDetail(source_id=vimeo_id)
        self._apply_player_config(detail, body, vimeo_id)
        return detail

    @staticmethod
    def _apply_player_config(detail: RawDetail, body: str, vimeo_id: str) -> None:
        """Copy upload date, duration and best progressive file from the player config"""
        try:
            config = json.loads(body)
        except ValueError as e:
            logger.warning(f"Failed to parse Vimeo config for {vimeo_id}: {e}")
            return

        video = config.get("video") or {}
        detail.published_date = video.get("upload_date")
        detail.duration = format_seconds(video.get("duration"))

        progressive = ((config.get("request") or {}).get("files") or {}).get("progressive") or []
        if progressive:
            best = max(progressive, key=lambda f: f.get("height") or 0)
            detail.download_url = best.get("url")
