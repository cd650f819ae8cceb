from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urljoin, urlsplit

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from tubegrab.domain.errors import RawFailure, StrategyFailure
from tubegrab.domain.models import RawStreamDescriptor, RawVideoInfo


_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
_MEDIA_SELECTORS = (("video > source", "src"), ("video", "src"))
_KNOWN_EXTS = {"mp4", "webm", "mov", "m4v", "mkv", "flv", "m3u8"}


async def _attr(page: Page, selector: str, name: str) -> str | None:
    el = await page.query_selector(selector)
    if el is None:
        return None
    value = await el.get_attribute(name)
    return value.strip() if value and value.strip() else None


def _ext_from_url(url: str) -> str:
    suffix = PurePosixPath(urlsplit(url).path).suffix.lstrip(".").lower()
    return suffix if suffix in _KNOWN_EXTS else "mp4"


class BrowserScraper:
    """
    Last-resort scrape through headless Chromium.
    Returns title, thumbnail and the page's direct media source.
    """

    def __init__(self, *, timeout_sec: float, user_agent: str | None = None) -> None:
        self._timeout_ms = timeout_sec * 1000
        self._user_agent = user_agent

    async def scrape(self, url: str) -> RawVideoInfo:
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=True, args=_LAUNCH_ARGS)
                try:
                    context = await browser.new_context(user_agent=self._user_agent)
                    page = await context.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=self._timeout_ms)

                    title = await page.title()
                    thumbnail = await _attr(page, "meta[property='og:image']", "content")
                    src = None
                    for selector, name in _MEDIA_SELECTORS:
                        src = await _attr(page, selector, name)
                        if src:
                            break
                    page_url = page.url
                finally:
                    await browser.close()
        except PlaywrightTimeoutError as exc:
            raise StrategyFailure(RawFailure(message=f"Browser navigation timed out: {exc}", timed_out=True)) from exc
        except PlaywrightError as exc:
            raise StrategyFailure(RawFailure(message=f"Browser scrape failed: {exc}")) from exc

        if not src or src.startswith("blob:"):
            raise StrategyFailure.from_message("Browser scrape found no direct media source on the page.")

        media_url = urljoin(page_url, src)
        logger.info("Browser scrape found media for {!r}: {}", title, media_url)

        return RawVideoInfo(
            title=title.strip() or None,
            thumbnail=thumbnail,
            formats=(
                RawStreamDescriptor(
                    format_id="browser-0",
                    vcodec="unknown",
                    acodec="unknown",
                    ext=_ext_from_url(media_url),
                    url=media_url,
                    protocol=urlsplit(media_url).scheme or None,
                    format_note="Default",
                ),
            ),
        )
