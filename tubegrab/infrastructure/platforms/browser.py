from __future__ import annotations

from tubegrab.domain.models import RawVideoInfo, StrategyName
from tubegrab.infrastructure.browser.scraper import BrowserScraper
from .base import AbstractExtractionStrategy


class BrowserStrategy(AbstractExtractionStrategy):
    name = StrategyName.BROWSER

    def __init__(self, *, scraper: BrowserScraper) -> None:
        self._scraper = scraper

    async def resolve(self, url: str) -> RawVideoInfo:
        return await self._scraper.scrape(url)
