from __future__ import annotations

import asyncio

from tubegrab.domain.classifier import is_forbidden
from tubegrab.domain.errors import StrategyFailure
from tubegrab.domain.models import RawVideoInfo, StrategyName
from tubegrab.domain.retry import NO_RETRY, BackoffPolicy, Sleep, retry_async
from tubegrab.infrastructure.cookies import CookieFileManager
from tubegrab.infrastructure.yt import YdlClient, parse_info
from .base import AbstractExtractionStrategy


def is_transient_extraction(exc: BaseException) -> bool:
    return isinstance(exc, StrategyFailure) and (exc.failure.timed_out or is_forbidden(exc.failure))


class ExtractorStrategy(AbstractExtractionStrategy):
    """
    yt-dlp metadata dump. Also used, under the MIRROR name,
    for host-substituted variants of the same URL.
    """

    def __init__(
        self,
        *,
        ydl: YdlClient,
        cookies: CookieFileManager | None = None,
        retry_policy: BackoffPolicy = NO_RETRY,
        name: StrategyName = StrategyName.EXTRACTOR,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.name = name
        self._ydl = ydl
        self._cookies = cookies
        self._retry_policy = retry_policy
        self._sleep = sleep

    async def resolve(self, url: str) -> RawVideoInfo:
        cookies_path = await asyncio.to_thread(self._cookies.valid_path) if self._cookies is not None else None

        async def _dump() -> dict:
            return await self._ydl.dump_info(url, cookies=cookies_path)

        info = await retry_async(
            _dump,
            policy=self._retry_policy,
            is_transient=is_transient_extraction,
            sleep=self._sleep,
            label=f"{self.name.value} extraction",
        )
        return parse_info(info)
