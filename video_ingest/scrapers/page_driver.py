"""Page driver contract shared by all source scrapers"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from ..utils import TerminalError

# (descriptor, attribute); a None descriptor means the item element itself,
# a None attribute means its visible text
FieldSpec = Tuple[Optional[str], Optional[str]]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ExtractionError(Exception):
    """Navigation or extraction failed (retryable)"""


class ExtractionTimeout(ExtractionError):
    """A navigation or selector wait exceeded its timeout budget"""


class InvalidSelectorError(ExtractionError, TerminalError):
    """A descriptor could not be interpreted by the driver"""


class UnsupportedOperation(ExtractionError, TerminalError):
    """The driver cannot perform the requested interaction"""


class PageDriver(ABC):
    """
    Navigation and extraction primitives over one browsing session.

    Descriptors are opaque, source-defined locators (CSS, XPath or
    text-match); scrapers never touch the underlying browser or parser.
    Every wait is bounded by a timeout and raises ExtractionTimeout.
    """

    default_timeout_ms: int = 45000

    def __enter__(self) -> "PageDriver":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def close(self):
        """Release the browsing session"""
        pass

    @abstractmethod
    def navigate(
        self,
        url: str,
        ready_signal: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """Load a page and optionally wait until `ready_signal` is present"""
        pass

    @abstractmethod
    def extract(self, descriptor: str, attribute: Optional[str] = None) -> Optional[str]:
        """Text (or attribute) of the first match, None if nothing matches"""
        pass

    @abstractmethod
    def extract_all(self, descriptor: str, attribute: Optional[str] = None) -> List[str]:
        """Text (or attribute) of every match, in document order"""
        pass

    @abstractmethod
    def extract_items(
        self,
        container: str,
        fields: Dict[str, FieldSpec],
    ) -> List[Dict[str, Optional[str]]]:
        """Extract the same fields from every element matching `container`"""
        pass

    @abstractmethod
    def click(self, descriptor: str, timeout_ms: Optional[int] = None) -> None:
        """Click the first match"""
        pass

    @abstractmethod
    def fill(self, descriptor: str, value: str) -> None:
        """Type a value into an input"""
        pass

    @abstractmethod
    def wait_for(
        self,
        descriptor: str,
        state: str = "visible",
        timeout_ms: Optional[int] = None,
    ) -> None:
        """Wait for an element to reach a state (attached/detached/visible/hidden)"""
        pass

    @abstractmethod
    def await_response_matching(
        self,
        url_pattern: str,
        timeout_ms: Optional[int] = None,
        navigate_to: Optional[str] = None,
    ) -> str:
        """
        Block until a network response whose URL matches `url_pattern` arrives.

        Args:
            url_pattern: Regular expression matched against response URLs
            timeout_ms: Wait budget
            navigate_to: Page to load to trigger the response

        Returns:
            Response body as text
        """
        pass
