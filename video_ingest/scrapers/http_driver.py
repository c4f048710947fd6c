"""Static HTML page driver (fetch + parse, no JavaScript)"""

import re
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests
import urllib3
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from .page_driver import (
    PageDriver,
    FieldSpec,
    ExtractionError,
    ExtractionTimeout,
    InvalidSelectorError,
    UnsupportedOperation,
    DEFAULT_USER_AGENT,
)
from ..utils import get_logger

logger = get_logger(__name__)


class HttpPageDriver(PageDriver):
    """
    Page driver for sources that serve their content as plain HTML.

    Supports CSS descriptors only; interactions that need a browser
    (click, fill) raise UnsupportedOperation.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int = 30000,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.default_timeout_ms = timeout_ms
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        })
        self.current_url: Optional[str] = None
        self._soup: Optional[BeautifulSoup] = None

        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def close(self):
        self.session.close()

    def _get(self, url: str, timeout_ms: Optional[int]) -> requests.Response:
        timeout = (timeout_ms if timeout_ms is not None else self.default_timeout_ms) / 1000
        try:
            response = self.session.get(url, timeout=timeout, verify=self.verify_ssl)
            response.raise_for_status()
            return response
        except requests.Timeout as e:
            raise ExtractionTimeout(f"Timed out fetching {url}") from e
        except requests.RequestException as e:
            raise ExtractionError(f"Failed to fetch {url}: {e}") from e

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            raise ExtractionError("No page loaded; call navigate() first")
        return self._soup

    def _select(self, descriptor: str, root=None):
        if descriptor.startswith(("/", "xpath=", "text=")) or ":has-text(" in descriptor:
            raise InvalidSelectorError(f"HttpPageDriver only supports CSS selectors: {descriptor}")
        try:
            return (root if root is not None else self.soup).select(descriptor)
        except SelectorSyntaxError as e:
            raise InvalidSelectorError(f"Invalid selector {descriptor}: {e}") from e

    def _read(self, element, attribute: Optional[str]) -> Optional[str]:
        if attribute is None:
            return element.get_text(" ", strip=True)
        value = element.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        if value and attribute in ("href", "src") and self.current_url:
            value = urljoin(self.current_url, value)
        return value

    def navigate(self, url, ready_signal=None, timeout_ms=None):
        logger.debug(f"Fetching {url}")
        response = self._get(url, timeout_ms)
        self.current_url = response.url
        self._soup = BeautifulSoup(response.content, "html.parser")

        if ready_signal and not self._select(ready_signal):
            # Static pages never become ready later
            raise ExtractionError(f"Ready signal {ready_signal} not found on {url}")

    def extract(self, descriptor, attribute=None):
        matches = self._select(descriptor)
        if not matches:
            return None
        return self._read(matches[0], attribute)

    def extract_all(self, descriptor, attribute=None):
        values = [self._read(el, attribute) for el in self._select(descriptor)]
        return [v for v in values if v is not None]

    def extract_items(self, container, fields: Dict[str, FieldSpec]):
        items = []
        for element in self._select(container):
            item = {}
            for name, (descriptor, attribute) in fields.items():
                if descriptor:
                    matches = self._select(descriptor, root=element)
                    target = matches[0] if matches else None
                else:
                    target = element
                item[name] = self._read(target, attribute) if target is not None else None
            items.append(item)
        return items

    def click(self, descriptor, timeout_ms=None):
        raise UnsupportedOperation("HttpPageDriver cannot click elements")

    def fill(self, descriptor, value):
        raise UnsupportedOperation("HttpPageDriver cannot fill forms")

    def wait_for(self, descriptor, state="visible", timeout_ms=None):
        present = bool(self._select(descriptor))
        if state in ("hidden", "detached"):
            if present:
                raise ExtractionError(f"{descriptor} still present")
        elif not present:
            raise ExtractionError(f"{descriptor} not found")

    def await_response_matching(self, url_pattern, timeout_ms=None, navigate_to=None) -> str:
        if not navigate_to:
            raise UnsupportedOperation("HttpPageDriver needs a URL to request")
        response = self._get(navigate_to, timeout_ms)
        if not re.search(url_pattern, response.url):
            raise ExtractionError(f"Response from {response.url} does not match {url_pattern}")
        return response.text
