"""Tests for the static HTML page driver"""

from unittest.mock import MagicMock

import pytest
import requests

from video_ingest.scrapers import (
    ExtractionError,
    ExtractionTimeout,
    InvalidSelectorError,
    UnsupportedOperation,
)
from video_ingest.scrapers.http_driver import HttpPageDriver
from video_ingest.utils.retry import is_terminal

PAGE = b"""
<html><body>
  <section class="avs-file"><a class="ecl-link" href="/en/video/I-100">First</a></section>
  <section class="avs-file"><a class="ecl-link" href="/en/video/I-200">Second</a></section>
  <div class="card"><h3><a href="https://example.com/a">Card A</a></h3><span class="len">05:30</span></div>
  <div class="card"><h3><a href="//example.com/b">Card B</a></h3></div>
  <p id="empty"></p>
</body></html>
"""


def fake_response(url, content=PAGE):
    response = MagicMock()
    response.url = url
    response.content = content
    response.text = content.decode()
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    session.get.return_value = fake_response("https://audiovisual.ec.europa.eu/en/search")
    return session


@pytest.fixture
def driver(session):
    with HttpPageDriver(session=session) as driver:
        driver.navigate("https://audiovisual.ec.europa.eu/en/search")
        yield driver


def test_sets_user_agent(session):
    HttpPageDriver(user_agent="test-agent", session=session)
    assert session.headers["User-Agent"] == "test-agent"


def test_extract_text_and_resolved_href(driver):
    assert driver.extract("section.avs-file a.ecl-link") == "First"
    assert driver.extract("section.avs-file a", attribute="href") == "https://audiovisual.ec.europa.eu/en/video/I-100"
    assert driver.extract("div.missing") is None


def test_extract_all(driver):
    assert driver.extract_all("section.avs-file a.ecl-link", attribute="href") == [
        "https://audiovisual.ec.europa.eu/en/video/I-100",
        "https://audiovisual.ec.europa.eu/en/video/I-200",
    ]


def test_extract_items(driver):
    items = driver.extract_items("div.card", {
        "title": ("h3 a", None),
        "url": ("h3 a", "href"),
        "duration": ("span.len", None),
        "text": (None, None),
    })

    assert items[0]["title"] == "Card A"
    assert items[0]["duration"] == "05:30"
    assert items[1]["url"] == "https://example.com/b"
    assert items[1]["duration"] is None
    assert items[1]["text"] == "Card B"


def test_empty_element_is_still_a_root(driver):
    assert driver.extract_items("p#empty", {"inner": ("span", None)}) == [{"inner": None}]


@pytest.mark.parametrize("descriptor", ["//div[@class='card']", "text=Download", 'a:has-text("Download")', "div["])
def test_invalid_selectors_are_terminal(driver, descriptor):
    with pytest.raises(InvalidSelectorError) as excinfo:
        driver.extract(descriptor)
    assert is_terminal(excinfo.value)


def test_interactions_are_unsupported(driver):
    with pytest.raises(UnsupportedOperation) as excinfo:
        driver.click("a.ecl-link")
    assert is_terminal(excinfo.value)
    with pytest.raises(UnsupportedOperation):
        driver.fill("input", "value")


def test_wait_for_presence(driver):
    driver.wait_for("div.card")
    driver.wait_for("div.missing", state="hidden")
    with pytest.raises(ExtractionError):
        driver.wait_for("div.missing")
    with pytest.raises(ExtractionError):
        driver.wait_for("div.card", state="detached")


def test_timeout_is_retryable(session):
    session.get.side_effect = requests.Timeout("read timed out")
    driver = HttpPageDriver(session=session)

    with pytest.raises(ExtractionTimeout) as excinfo:
        driver.navigate("https://example.com", timeout_ms=1000)

    assert not is_terminal(excinfo.value)
    assert session.get.call_args.kwargs["timeout"] == 1.0


def test_http_error_is_extraction_error(session):
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503")
    driver = HttpPageDriver(session=session)
    with pytest.raises(ExtractionError):
        driver.navigate("https://example.com")


def test_missing_ready_signal(session):
    driver = HttpPageDriver(session=session)
    with pytest.raises(ExtractionError):
        driver.navigate("https://audiovisual.ec.europa.eu/en/search", ready_signal="div.never")


def test_extract_before_navigate(session):
    with pytest.raises(ExtractionError):
        HttpPageDriver(session=session).extract("a")


def test_await_response_matching(session):
    session.get.return_value = fake_response("https://player.vimeo.com/video/42/config", b'{"video": {}}')
    driver = HttpPageDriver(session=session)

    body = driver.await_response_matching(
        r"player\.vimeo\.com/video/42/config",
        navigate_to="https://player.vimeo.com/video/42/config",
    )

    assert body == '{"video": {}}'


def test_await_response_not_matching(session):
    driver = HttpPageDriver(session=session)
    with pytest.raises(ExtractionError):
        driver.await_response_matching(r"vimeo", navigate_to="https://example.com")


def test_close_releases_session(session):
    with HttpPageDriver(session=session):
        pass
    session.close.assert_called_once()
