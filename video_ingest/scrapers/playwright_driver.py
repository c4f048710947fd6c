"""Headless browser page driver backed by Playwright"""

import re
import sys
from typing import Dict, List, Optional

from playwright.sync_api import (
    sync_playwright,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from .page_driver import (
    PageDriver,
    FieldSpec,
    ExtractionError,
    ExtractionTimeout,
    InvalidSelectorError,
    DEFAULT_USER_AGENT,
)
from ..utils import get_logger

logger = get_logger(__name__)

_INVALID_SELECTOR_MARKERS = ("is not a valid selector", "Unexpected token", "Unknown engine")


class PlaywrightPageDriver(PageDriver):
    """One Chromium page; use as a context manager to own the browser lifecycle"""

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int = 45000,
        extra_headers: Optional[Dict[str, str]] = None,
        launch_args: Optional[List[str]] = None,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.default_timeout_ms = timeout_ms
        self.extra_headers = extra_headers or {"Accept-Language": "en-US,en;q=0.9"}
        self.launch_args = launch_args or ["--disable-blink-features=AutomationControlled"]
        self._playwright_cm = None
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def __enter__(self) -> "PlaywrightPageDriver":
        self._playwright_cm = sync_playwright()
        self._playwright = self._playwright_cm.__enter__()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.headless,
                args=self.launch_args,
            )
            self._context = self._browser.new_context(
                user_agent=self.user_agent,
                extra_http_headers=self.extra_headers,
            )
            self._context.set_default_timeout(self.default_timeout_ms)
            self._page = self._context.new_page()
        except BaseException:
            self.__exit__(*sys.exc_info())
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        if self._playwright_cm is not None:
            self._playwright_cm.__exit__(exc_type, exc, tb)
        self._playwright_cm = None
        self._playwright = None
        return False

    def close(self):
        """Close the page, context and browser"""
        if self._context is not None:
            self._context.close()
        if self._browser is not None:
            self._browser.close()
        self._page = None
        self._context = None
        self._browser = None

    @property
    def page(self):
        if self._page is None:
            raise ExtractionError("PlaywrightPageDriver must be used as a context manager")
        return self._page

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return timeout_ms if timeout_ms is not None else self.default_timeout_ms

    def _translate(self, error: Exception, action: str) -> ExtractionError:
        """Map Playwright errors onto the extraction error taxonomy"""
        if isinstance(error, PlaywrightTimeoutError):
            return ExtractionTimeout(f"Timed out during {action}")
        message = str(error)
        if any(marker in message for marker in _INVALID_SELECTOR_MARKERS):
            return InvalidSelectorError(f"Invalid selector during {action}: {message}")
        return ExtractionError(f"{action} failed: {message}")

    def navigate(self, url, ready_signal=None, timeout_ms=None):
        timeout = self._timeout(timeout_ms)
        logger.debug(f"Navigating to {url}")
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            if ready_signal:
                self.page.wait_for_selector(ready_signal, timeout=timeout)
        except PlaywrightError as e:
            raise self._translate(e, f"navigation to {url}") from e

    def extract(self, descriptor, attribute=None):
        try:
            element = self.page.query_selector(descriptor)
            if element is None:
                return None
            return self._read(element, attribute)
        except PlaywrightError as e:
            raise self._translate(e, f"extract {descriptor}") from e

    def extract_all(self, descriptor, attribute=None):
        try:
            values = [self._read(el, attribute) for el in self.page.query_selector_all(descriptor)]
        except PlaywrightError as e:
            raise self._translate(e, f"extract_all {descriptor}") from e
        return [v for v in values if v is not None]

    def extract_items(self, container, fields: Dict[str, FieldSpec]):
        items = []
        try:
            for element in self.page.query_selector_all(container):
                item = {}
                for name, (descriptor, attribute) in fields.items():
                    target = element.query_selector(descriptor) if descriptor else element
                    item[name] = self._read(target, attribute) if target is not None else None
                items.append(item)
        except PlaywrightError as e:
            raise self._translate(e, f"extract_items {container}") from e
        return items

    def _read(self, element, attribute: Optional[str]) -> Optional[str]:
        if attribute is None:
            text = element.inner_text()
            return text.strip() if text is not None else None
        if attribute == "href":
            # Resolved URL rather than the raw attribute value
            return element.evaluate("el => el.href || el.getAttribute('href')")
        return element.get_attribute(attribute)

    def click(self, descriptor, timeout_ms=None):
        try:
            self.page.click(descriptor, timeout=self._timeout(timeout_ms))
        except PlaywrightError as e:
            raise self._translate(e, f"click {descriptor}") from e

    def fill(self, descriptor, value):
        try:
            self.page.fill(descriptor, value)
        except PlaywrightError as e:
            raise self._translate(e, f"fill {descriptor}") from e

    def wait_for(self, descriptor, state="visible", timeout_ms=None):
        try:
            self.page.wait_for_selector(descriptor, state=state, timeout=self._timeout(timeout_ms))
        except PlaywrightError as e:
            raise self._translate(e, f"wait for {descriptor} ({state})") from e

    def await_response_matching(self, url_pattern, timeout_ms=None, navigate_to=None):
        pattern = re.compile(url_pattern)
        timeout = self._timeout(timeout_ms)
        try:
            with self.page.expect_response(
                lambda response: bool(pattern.search(response.url)),
                timeout=timeout,
            ) as response_info:
                if navigate_to:
                    self.page.goto(navigate_to, wait_until="domcontentloaded", timeout=timeout)
            return response_info.value.text()
        except PlaywrightError as e:
            raise self._translate(e, f"waiting for response matching {url_pattern}") from e
