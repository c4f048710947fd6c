"""Base scraper interface"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .page_driver import PageDriver
from ..models import CandidateRef, RawDetail
from ..utils import TerminalError


class AuthenticationError(TerminalError):
    """A gated source refused or could not establish a session"""


class BaseScraper(ABC):
    """
    Abstract base class for source scrapers.

    A scraper only knows where a source keeps its fields; all navigation
    goes through the injected PageDriver and the caller applies retries.
    """

    name: str = ""  # Registry key, e.g. "eu_parliament"
    content_provider: str = ""  # Human-readable source name stored with each video
    date_format: Optional[str] = None  # strptime format of absolute dates, if fixed
    requires_authentication: bool = False

    def __init__(self, driver: PageDriver, timeout_ms: int = 45000):
        """Initialize scraper with its browsing session"""
        self.driver = driver
        self.timeout_ms = timeout_ms

    @abstractmethod
    def list_recent(self, limit: int = 5) -> List[CandidateRef]:
        """
        Discover the most recent videos on the source

        Args:
            limit: Maximum number of candidates to return

        Returns:
            Candidates in the order they must be processed
        """
        pass

    @abstractmethod
    def fetch_detail(self, candidate: CandidateRef) -> Optional[RawDetail]:
        """
        Extract raw metadata from a candidate's detail page

        Args:
            candidate: Reference produced by list_recent

        Returns:
            RawDetail, or None when the page lacks the structure that
            makes it a usable video (skip, not a failure)
        """
        pass

    def authenticate(self) -> None:
        """Establish a session before listing (only for gated sources)"""
        return None

    def resolve_download_url(self, url: str) -> str:
        """Post-process an extracted download URL (optional)"""
        return url

    def __repr__(self):
        return f"{self.__class__.__name__}(source={self.name})"
