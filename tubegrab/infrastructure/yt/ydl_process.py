from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class YdlProcessSpec:
    """
    Immutable spec for running yt-dlp as subprocess.
    """
    command: Sequence[str]
    args: Sequence[str]
    timeout_sec: float | None = None


@dataclass(frozen=True, slots=True)
class ProcessResult:
    returncode: int | None
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class YdlProcessRunner:
    """
    Runs yt-dlp as an asyncio subprocess and allows controlled termination.
    One runner per invocation.
    """

    def __init__(self, spec: YdlProcessSpec) -> None:
        self._spec = spec
        self._process: asyncio.subprocess.Process | None = None

    async def start(self) -> None:
        if self._process is not None:
            raise RuntimeError("yt-dlp process already started")

        log.debug("Starting yt-dlp subprocess: %s", " ".join(self._spec.args))
        self._process = await asyncio.create_subprocess_exec(
            *self._spec.command,
            *self._spec.args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

    async def wait(self) -> ProcessResult:
        if self._process is None:
            raise RuntimeError("yt-dlp process not started")

        try:
            stdout, stderr = await asyncio.wait_for(
                self._process.communicate(), timeout=self._spec.timeout_sec
            )
        except asyncio.TimeoutError:
            log.warning("yt-dlp timed out after %ss", self._spec.timeout_sec)
            await self.terminate()
            return ProcessResult(
                returncode=self._process.returncode,
                stdout="",
                stderr=f"yt-dlp timed out after {self._spec.timeout_sec}s",
                timed_out=True,
            )

        result = ProcessResult(
            returncode=self._process.returncode,
            stdout=stdout.decode(errors="ignore"),
            stderr=stderr.decode(errors="ignore").strip(),
        )
        if result.returncode != 0:
            log.error("yt-dlp failed (exit %s): %s", result.returncode, result.stderr)
        return result

    async def run(self) -> ProcessResult:
        await self.start()
        return await self.wait()

    async def terminate(self, timeout: float = 5.0) -> None:
        if self._process is None:
            return

        if self._process.returncode is not None:
            return

        log.info("Terminating yt-dlp subprocess")
        self._process.terminate()

        try:
            await asyncio.wait_for(self._process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            log.warning("yt-dlp did not terminate in time, killing")
            self._process.kill()
            await self._process.wait()
