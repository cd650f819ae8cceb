from __future__ import annotations

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from tubegrab.domain.classifier import classify
from tubegrab.domain.errors import ErrorKind, StrategyFailure
from tubegrab.infrastructure.browser import scraper
from tubegrab.infrastructure.browser.scraper import BrowserScraper, _ext_from_url


PAGE_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class FakeElement:
    def __init__(self, attrs: dict):
        self.attrs = attrs

    async def get_attribute(self, name):
        return self.attrs.get(name)


class FakePage:
    def __init__(self, elements: dict, *, title="Page title", url=PAGE_URL, goto_error=None):
        self.elements = elements
        self._title = title
        self.url = url
        self.goto_error = goto_error
        self.visited = []

    async def goto(self, url, *, wait_until=None, timeout=None):
        self.visited.append((url, wait_until, timeout))
        if self.goto_error is not None:
            raise self.goto_error

    async def title(self):
        return self._title

    async def query_selector(self, selector):
        attrs = self.elements.get(selector)
        return FakeElement(attrs) if attrs is not None else None


class FakeBrowser:
    def __init__(self, page: FakePage):
        self.page = page
        self.closed = False
        self.user_agent = None

    async def new_context(self, *, user_agent=None):
        self.user_agent = user_agent
        return self

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakePlaywright:
    def __init__(self, browser: FakeBrowser):
        self.browser = browser
        self.chromium = self

    async def launch(self, *, headless, args):
        assert headless is True
        return self.browser

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture()
def install_page(monkeypatch):
    def _install(page: FakePage) -> FakeBrowser:
        browser = FakeBrowser(page)
        monkeypatch.setattr(scraper, "async_playwright", lambda: FakePlaywright(browser))
        return browser

    return _install


async def test_source_element_is_used_and_relative_src_is_joined(install_page):
    page = FakePage(
        {
            "video > source": {"src": "/media/clip.webm"},
            "meta[property='og:image']": {"content": "https://i.example/thumb.jpg"},
        },
        title="  Clip  ",
    )
    browser = install_page(page)

    info = await BrowserScraper(timeout_sec=5, user_agent="UA/1.0").scrape(PAGE_URL)

    assert info.title == "Clip"
    assert info.thumbnail == "https://i.example/thumb.jpg"
    (fmt,) = info.formats
    assert fmt.url == "https://www.youtube.com/media/clip.webm"
    assert fmt.ext == "webm"
    assert fmt.protocol == "https"
    assert page.visited == [(PAGE_URL, "networkidle", 5000)]
    assert browser.user_agent == "UA/1.0"
    assert browser.closed


async def test_video_src_is_used_when_there_is_no_source_element(install_page):
    install_page(FakePage({"video": {"src": "https://cdn.example/v/stream"}}))

    info = await BrowserScraper(timeout_sec=5).scrape(PAGE_URL)

    assert info.formats[0].url == "https://cdn.example/v/stream"
    assert info.formats[0].ext == "mp4"


@pytest.mark.parametrize(
    "elements",
    [
        {},
        {"video": {"src": "   "}},
        {"video": {"src": "blob:https://www.youtube.com/5f1c"}},
    ],
)
async def test_no_direct_media_source_is_a_strategy_failure(install_page, elements):
    browser = install_page(FakePage(elements))

    with pytest.raises(StrategyFailure) as exc_info:
        await BrowserScraper(timeout_sec=5).scrape(PAGE_URL)

    assert not exc_info.value.failure.timed_out
    assert browser.closed


async def test_navigation_timeout_is_reported_as_timed_out(install_page):
    browser = install_page(FakePage({}, goto_error=PlaywrightTimeoutError("Timeout 5000ms exceeded.")))

    with pytest.raises(StrategyFailure) as exc_info:
        await BrowserScraper(timeout_sec=5).scrape(PAGE_URL)

    assert exc_info.value.failure.timed_out
    assert classify(exc_info.value.failure).kind is ErrorKind.TIMEOUT
    assert browser.closed


@pytest.mark.parametrize(
    "url, ext",
    [
        ("https://cdn.example/a/clip.WEBM?sig=1", "webm"),
        ("https://cdn.example/a/clip.mov", "mov"),
        ("https://cdn.example/a/index.m3u8", "m3u8"),
        ("https://cdn.example/a/clip.php", "mp4"),
        ("https://cdn.example/a/stream", "mp4"),
    ],
)
def test_ext_from_url(url, ext):
    assert _ext_from_url(url) == ext
