"""Shared pytest fixtures for the video ingestion test suite."""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from video_ingest.database import DatabaseManager
from video_ingest.models import CandidateRef, RawDetail
from video_ingest.scrapers import BaseScraper, PageDriver, ExtractionError
from video_ingest.utils import RetryPolicy

FIXED_NOW = datetime(2025, 3, 10, 0, 0, 0)


class FakePageDriver(PageDriver):
    """
    Scripted page driver.

    `pages` maps a URL to the values found on it: descriptor -> text,
    "descriptor@attribute" -> attribute value, container -> list of item
    dicts for extract_items. A list value answers extract_all.
    """

    def __init__(
        self,
        pages: Optional[Dict[str, dict]] = None,
        responses: Optional[Dict[str, str]] = None,
        failing_clicks: Optional[List[str]] = None,
    ):
        self.pages = pages or {}
        self.responses = responses or {}
        self.failing_clicks = set(failing_clicks or [])
        self.current_url: Optional[str] = None
        self.visited: List[str] = []
        self.clicked: List[str] = []
        self.filled: Dict[str, str] = {}
        self.closed = False

    def close(self):
        self.closed = True

    def _values(self) -> dict:
        return self.pages.get(self.current_url, {})

    def _lookup(self, descriptor, attribute=None):
        key = f"{descriptor}@{attribute}" if attribute else descriptor
        return self._values().get(key)

    def navigate(self, url, ready_signal=None, timeout_ms=None):
        self.visited.append(url)
        if url not in self.pages:
            raise ExtractionError(f"Failed to load {url}")
        self.current_url = url

    def extract(self, descriptor, attribute=None):
        value = self._lookup(descriptor, attribute)
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def extract_all(self, descriptor, attribute=None):
        value = self._lookup(descriptor, attribute)
        if value is None:
            return []
        return value if isinstance(value, list) else [value]

    def extract_items(self, container, fields):
        items = self._values().get(container) or []
        return [{name: item.get(name) for name in fields} for item in items]

    def click(self, descriptor, timeout_ms=None):
        if descriptor in self.failing_clicks:
            raise ExtractionError(f"Nothing to click at {descriptor}")
        self.clicked.append(descriptor)

    def fill(self, descriptor, value):
        self.filled[descriptor] = value

    def wait_for(self, descriptor, state="visible", timeout_ms=None):
        return None

    def await_response_matching(self, url_pattern, timeout_ms=None, navigate_to=None):
        if navigate_to:
            self.visited.append(navigate_to)
        for pattern, body in self.responses.items():
            if pattern == url_pattern:
                return body
        raise ExtractionError(f"No response matching {url_pattern}")


class StubScraper(BaseScraper):
    """Scraper returning canned candidates and details"""

    name = "stub"
    content_provider = "Stub Source"
    date_format = "%d/%m/%Y"

    def __init__(self, candidates=None, details=None, list_error=None):
        super().__init__(driver=FakePageDriver())
        self.candidates = candidates or []
        # source_id -> RawDetail, None, or an exception instance to raise
        self.details = details or {}
        self.list_error = list_error
        self.list_calls = 0
        self.fetch_calls: Dict[str, int] = {}

    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return self.candidates[:limit]

    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        self.fetch_calls[candidate.source_id] = self.fetch_calls.get(candidate.source_id, 0) + 1
        detail = self.details.get(candidate.source_id)
        if isinstance(detail, Exception):
            raise detail
        return detail


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def store(tmp_path):
    """Temporary SQLite-backed record store."""
    with DatabaseManager(str(tmp_path / "videos.db")) as db:
        yield db


@pytest.fixture
def sleeps():
    """Delays requested by the retry policy."""
    return []


@pytest.fixture
def retry_policy(sleeps):
    """Retry policy that records delays instead of sleeping."""
    return RetryPolicy(max_attempts=3, base_delay=2.0, sleep=sleeps.append, rand=lambda a, b: 1.0)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
