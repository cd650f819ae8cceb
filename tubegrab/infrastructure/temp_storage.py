from __future__ import annotations

import asyncio
import re
import time
from pathlib import Path
from typing import Callable

from loguru import logger


_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|]')
_MAX_STEM = 150


def safe_title(title: str) -> str:
    s = _UNSAFE_CHARS.sub("_", title).strip()
    return s[:_MAX_STEM] or "video"


class TempStorage:
    """
    Scratch directory for merged output files.
    Filenames carry a millisecond timestamp so concurrent jobs never collide.
    """

    def __init__(self, *, root: Path, clock: Callable[[], float] = time.time) -> None:
        self._root = root
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    def output_path(self, title: str, *, suffix: str = "", ext: str = "mp4") -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        stamp = int(self._clock() * 1000)
        stem = safe_title(title)
        path = self._root / f"{stem}_{stamp}{suffix}.{ext}"
        while path.exists():
            stamp += 1
            path = self._root / f"{stem}_{stamp}{suffix}.{ext}"
        return path

    def resolve(self, name: str) -> Path | None:
        """Path of a file directly inside the root, or None."""
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        path = self._root / name
        return path if path.is_file() else None

    def sweep(self, max_age_sec: float) -> int:
        if not self._root.exists():
            self._root.mkdir(parents=True, exist_ok=True)
            return 0

        now = self._clock()
        deleted = 0
        for path in self._root.iterdir():
            if not path.is_file():
                continue
            try:
                age = now - path.stat().st_mtime
                if age > max_age_sec:
                    path.unlink()
                    deleted += 1
                    logger.debug("Deleted {} ({:.1f} minutes old)", path.name, age / 60)
            except FileNotFoundError:
                continue
        return deleted


class TempSweeper:
    """
    Periodically removes old files from TempStorage.
    """

    def __init__(self, *, storage: TempStorage, max_age_sec: float, interval_sec: float) -> None:
        self._storage = storage
        self._max_age_sec = max_age_sec
        self._interval_sec = interval_sec
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._loop(), name="temp-sweeper")
        logger.info(
            "Temp sweeper started: dir={} max_age={}s interval={}s",
            self._storage.root, self._max_age_sec, self._interval_sec,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("Temp sweeper stopped")

    async def run_once(self) -> int:
        deleted = await asyncio.to_thread(self._storage.sweep, self._max_age_sec)
        if deleted:
            logger.info("Cleanup complete. Deleted {} files.", deleted)
        return deleted

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except OSError as e:
                logger.error("Error during temp cleanup: {!r}", e)
            await asyncio.sleep(self._interval_sec)
