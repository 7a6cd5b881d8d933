"""
Page Capture Tests

Uses hand-rolled Playwright doubles so that the capture flow can be checked
without launching Chromium.

Key Scenarios:
- The snapshot script receives the scanner's selectors and attributes
- The browser is closed even when evaluation fails
- Contributor pages are recognized by URL

Usage:
    pytest tests/test_crawler.py
"""

import asyncio

import pytest

from gmaps_photos.crawler import capture_page, is_contributor_page
from gmaps_photos.documents import SNAPSHOT_SCRIPT
from gmaps_photos.scanner import IMAGE_SELECTORS, SNAPSHOT_ATTRIBUTES, scan

CONTRIB_URL = "https://www.google.com/maps/contrib/1234567890/photos"


class FakePage:
    def __init__(self, payload, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    def set_default_navigation_timeout(self, timeout):
        self.calls.append(("timeout", timeout))

    async def goto(self, url, wait_until=None):
        self.calls.append(("goto", url, wait_until))

    async def wait_for_timeout(self, ms):
        self.calls.append(("wait", ms))

    async def evaluate(self, script, arg=None):
        self.calls.append(("evaluate", script, arg))
        if self.error:
            raise self.error
        return self.payload


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False
        self.user_agent = None

    async def new_page(self, user_agent=None):
        self.user_agent = user_agent
        return self.page

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser):
        self.browser = browser

    async def launch(self, headless=True):
        return self.browser


class FakePlaywright:
    def __init__(self, page):
        self.browser = FakeBrowser(page)
        self.chromium = FakeChromium(self.browser)


PAYLOAD = {
    "elements": [
        {
            "tag": "img",
            "attributes": {"src": "https://lh3.googleusercontent.com/gps-cs/CAP=w400-h300-k-no", "alt": "Front"},
            "background": None,
            "matches": list(IMAGE_SELECTORS[:2]),
        }
    ],
    "markup": "<html><body></body></html>",
}


def test_capture_page_evaluates_snapshot_script(config):
    page = FakePage(PAYLOAD)
    playwright = FakePlaywright(page)

    snapshot = asyncio.run(capture_page(playwright, CONTRIB_URL, config))

    assert ("goto", CONTRIB_URL, "networkidle") in page.calls
    assert ("wait", 2000) in page.calls
    evaluate = [call for call in page.calls if call[0] == "evaluate"][0]
    assert evaluate[1] == SNAPSHOT_SCRIPT
    assert evaluate[2] == {"selectors": list(IMAGE_SELECTORS), "attributes": list(SNAPSHOT_ATTRIBUTES)}
    assert playwright.browser.closed
    assert playwright.browser.user_agent == config.user_agent

    records = scan(snapshot, config)
    assert [r.label for r in records] == ["Front"]


def test_capture_page_closes_browser_on_failure(config):
    page = FakePage(PAYLOAD, error=RuntimeError("page crashed"))
    playwright = FakePlaywright(page)

    with pytest.raises(RuntimeError, match="page crashed"):
        asyncio.run(capture_page(playwright, CONTRIB_URL, config))

    assert playwright.browser.closed


def test_capture_page_warns_outside_contributor_pages(config, caplog):
    playwright = FakePlaywright(FakePage(PAYLOAD))

    with caplog.at_level("WARNING", logger="gmaps_photos"):
        asyncio.run(capture_page(playwright, "https://example.com/", config))

    assert "not a Google Maps contributor page" in caplog.text


@pytest.mark.parametrize(
    "url,expected",
    [
        (CONTRIB_URL, True),
        ("https://www.google.com/maps/place/Somewhere", False),
        ("https://example.com/", False),
    ],
)
def test_is_contributor_page(url, expected):
    assert is_contributor_page(url) is expected
