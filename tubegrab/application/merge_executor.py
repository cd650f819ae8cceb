from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from tubegrab.domain.classifier import is_forbidden, tool_error_line
from tubegrab.domain.errors import MergeError, RawFailure, StrategyFailure
from tubegrab.domain.models import FormatCatalog, MergeJob
from tubegrab.domain.retry import BackoffPolicy, Sleep, retry_async
from tubegrab.infrastructure.cookies import CookieFileManager
from tubegrab.infrastructure.temp_storage import TempStorage
from tubegrab.infrastructure.yt import YdlClient


PRIMARY_SELECTOR = "{video_format_id}+bestaudio[ext=m4a]/best"
FALLBACK_SELECTOR = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"
# no muxer: only formats that already carry both streams
PROGRESSIVE_SELECTOR = "best[ext=mp4]/best"

MERGE_POLICY = BackoffPolicy(max_retries=2, base_delay=2.0, factor=2.0)


def is_transient_merge(exc: BaseException) -> bool:
    return isinstance(exc, StrategyFailure) and is_forbidden(exc.failure)


def describe(failure: RawFailure) -> str:
    return tool_error_line(failure.stderr) or failure.message


class MergeExecutor:
    """
    Produces one playable mp4 for a chosen video format.

    Primary: <format>+best audio, merged by the muxer.
    Fallback: a generic mp4-first selector into a new file.
    Both retry only forbidden-class failures; a run counts as
    successful only if its output file exists afterwards.
    """

    def __init__(
        self,
        *,
        ydl: YdlClient,
        storage: TempStorage,
        cookies: CookieFileManager | None = None,
        policy: BackoffPolicy = MERGE_POLICY,
        muxer_available: bool | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._ydl = ydl
        self._storage = storage
        self._cookies = cookies
        self._policy = policy
        self._muxer_available = ydl.config.muxer_available() if muxer_available is None else muxer_available
        self._sleep = sleep

        if not self._muxer_available:
            logger.warning("ffmpeg not found; merged downloads degrade to progressive formats")

    @property
    def muxer_available(self) -> bool:
        return self._muxer_available

    async def merge(self, source_url: str, video_format_id: str, catalog: FormatCatalog) -> Path:
        cookies = await asyncio.to_thread(self._cookies.valid_path) if self._cookies is not None else None
        if cookies is not None:
            logger.info("Using valid cookies file from {} for download", cookies)

        if self._muxer_available:
            job = MergeJob(source_url, video_format_id, self._storage.output_path(catalog.title))
            try:
                return await self._run_job(
                    job,
                    selector=PRIMARY_SELECTOR.format(video_format_id=video_format_id),
                    cookies=cookies,
                )
            except StrategyFailure as exc:
                primary_diag = describe(exc.failure)
                logger.warning(
                    "Merge of {} failed after {} attempt(s), trying fallback: {}",
                    video_format_id, job.attempts, primary_diag,
                )
            fallback_selector = FALLBACK_SELECTOR
        else:
            primary_diag = "ffmpeg is not available, merge skipped"
            fallback_selector = PROGRESSIVE_SELECTOR

        fallback = MergeJob(source_url, video_format_id, self._storage.output_path(catalog.title, suffix="_fallback"))
        try:
            return await self._run_job(fallback, selector=fallback_selector, cookies=cookies)
        except StrategyFailure as exc:
            fallback_diag = describe(exc.failure)
            logger.error("Fallback download also failed for {}: {}", source_url, fallback_diag)

        raise MergeError(
            f"Both merge and fallback download failed. Original error: {primary_diag}",
            primary_diagnostic=primary_diag,
            fallback_diagnostic=fallback_diag,
        )

    async def _run_job(self, job: MergeJob, *, selector: str, cookies: Path | None) -> Path:
        async def _attempt() -> Path:
            job.attempts += 1
            logger.info("Merge attempt {} for {} (format {!r}) -> {}", job.attempts, job.source_url, selector, job.output_path)
            try:
                await self._ydl.download(job.source_url, selector=selector, output=job.output_path, cookies=cookies)
            except StrategyFailure as exc:
                job.last_error = describe(exc.failure)
                raise

            if not job.output_path.exists():
                job.last_error = "Failed to create output file - FFmpeg might not be installed"
                raise StrategyFailure.from_message(job.last_error)
            return job.output_path

        path = await retry_async(
            _attempt,
            policy=self._policy,
            is_transient=is_transient_merge,
            sleep=self._sleep,
            label="merge",
        )
        logger.info("Video downloaded and merged to: {}", path)
        return path
