from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger

from tubegrab.domain.errors import RawFailure, StrategyFailure
from tubegrab.domain.models import RawStreamDescriptor, RawSubtitle, RawVideoInfo
from .ydl_config import YdlConfig
from .ydl_process import ProcessResult, YdlProcessRunner, YdlProcessSpec


ProcessRunner = Callable[[YdlProcessSpec], Awaitable[ProcessResult]]


async def run_process(spec: YdlProcessSpec) -> ProcessResult:
    return await YdlProcessRunner(spec).run()


def _safe_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _failure(result: ProcessResult, what: str) -> StrategyFailure:
    if result.timed_out:
        message = f"{what} timed out"
    else:
        message = f"{what} failed with exit code {result.returncode}"
    return StrategyFailure(
        RawFailure(
            message=message,
            returncode=result.returncode,
            stderr=result.stderr or None,
            timed_out=result.timed_out,
        )
    )


class YdlClient:
    """
    Thin async facade over the yt-dlp CLI.
    Owns argument building; never interprets formats.
    """

    def __init__(self, *, cfg: YdlConfig, runner: ProcessRunner = run_process) -> None:
        self._cfg = cfg
        self._runner = runner

    @property
    def config(self) -> YdlConfig:
        return self._cfg

    def _common_args(self, *, socket_timeout: int, cookies: Path | None) -> List[str]:
        args = [
            "--no-warnings",
            "--no-check-certificate",
            "--no-playlist",
            "--socket-timeout", str(socket_timeout),
            "--add-header", f"User-Agent:{self._cfg.user_agent}",
        ]
        if self._cfg.referer:
            args += ["--referer", self._cfg.referer]
        if cookies is not None:
            args += ["--cookies", str(cookies)]
        return args

    def extract_args(self, url: str, *, cookies: Path | None = None) -> List[str]:
        return [
            "--dump-single-json",
            "--skip-download",
            "--force-ipv4",
            *self._common_args(socket_timeout=self._cfg.extract_socket_timeout_sec, cookies=cookies),
            url,
        ]

    def download_args(self, url: str, *, selector: str, output: Path, cookies: Path | None = None) -> List[str]:
        args = [
            "-f", selector,
            "--merge-output-format", "mp4",
            "-o", str(output),
            *self._common_args(socket_timeout=self._cfg.merge_socket_timeout_sec, cookies=cookies),
        ]
        if self._cfg.ffmpeg_location:
            args += ["--ffmpeg-location", self._cfg.ffmpeg_location]
        args.append(url)
        return args

    async def _run(self, args: List[str], *, timeout: float | None, what: str) -> ProcessResult:
        spec = YdlProcessSpec(command=self._cfg.command, args=args, timeout_sec=timeout)
        try:
            return await self._runner(spec)
        except OSError as exc:
            logger.error("yt-dlp could not be started ({}): {!r}", " ".join(self._cfg.command), exc)
            raise StrategyFailure(
                RawFailure(message=f"{what} failed: yt-dlp binary not found or not executable ({exc})")
            ) from exc

    async def dump_info(self, url: str, *, cookies: Path | None = None) -> Dict[str, Any]:
        result = await self._run(
            self.extract_args(url, cookies=cookies),
            timeout=self._cfg.extract_timeout_sec,
            what="metadata extraction",
        )
        if not result.ok:
            raise _failure(result, "metadata extraction")

        try:
            info = json.loads(result.stdout)
        except ValueError as exc:
            raise StrategyFailure(
                RawFailure(message="Failed to parse video information returned by the extractor.")
            ) from exc

        if isinstance(info, dict) and info.get("_type") == "playlist":
            entries = [e for e in info.get("entries") or [] if isinstance(e, dict)]
            info = entries[0] if entries else None

        if not isinstance(info, dict):
            raise StrategyFailure.from_message("Invalid video information returned by the extractor.")
        return info

    async def download(self, url: str, *, selector: str, output: Path, cookies: Path | None = None) -> ProcessResult:
        output.parent.mkdir(parents=True, exist_ok=True)
        result = await self._run(
            self.download_args(url, selector=selector, output=output, cookies=cookies),
            timeout=None,
            what="download",
        )
        if not result.ok:
            raise _failure(result, "download")
        return result


def _parse_format(f: Dict[str, Any]) -> RawStreamDescriptor:
    return RawStreamDescriptor(
        format_id=_opt_str(f.get("format_id")),
        vcodec=_opt_str(f.get("vcodec")),
        acodec=_opt_str(f.get("acodec")),
        ext=_opt_str(f.get("ext")),
        height=_safe_int(f.get("height")),
        width=_safe_int(f.get("width")),
        fps=_safe_float(f.get("fps")),
        abr=_safe_float(f.get("abr")),
        filesize=_safe_int(f.get("filesize")),
        filesize_approx=_safe_int(f.get("filesize_approx")),
        url=_opt_str(f.get("url")),
        protocol=_opt_str(f.get("protocol")),
        format_note=_opt_str(f.get("format_note")),
        format=_opt_str(f.get("format")),
        container=_opt_str(f.get("container")),
    )


def _parse_subtitles(raw: Any) -> Dict[str, tuple[RawSubtitle, ...]]:
    if not isinstance(raw, dict):
        return {}
    out: Dict[str, tuple[RawSubtitle, ...]] = {}
    for lang, tracks in raw.items():
        if not isinstance(tracks, list):
            continue
        out[str(lang)] = tuple(
            RawSubtitle(url=_opt_str(t.get("url")), ext=_opt_str(t.get("ext")), name=_opt_str(t.get("name")))
            for t in tracks
            if isinstance(t, dict)
        )
    return out


def parse_info(info: Dict[str, Any]) -> RawVideoInfo:
    """The only place that reads the extractor's dynamic JSON."""
    formats = info.get("formats")
    if not isinstance(formats, list):
        formats = []

    return RawVideoInfo(
        title=_opt_str(info.get("title")) or _opt_str(info.get("fulltitle")) or _opt_str(info.get("alt_title")),
        thumbnail=_opt_str(info.get("thumbnail")),
        duration_sec=_safe_float(info.get("duration")),
        formats=tuple(_parse_format(f) for f in formats if isinstance(f, dict)),
        subtitles=_parse_subtitles(info.get("subtitles")),
    )
