from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from yt_dlp.utils.networking import std_headers

from tubegrab.config.settings import AppSettings


def _default_user_agent() -> str:
    return str(std_headers["User-Agent"])


def _default_command() -> tuple[str, ...]:
    return (sys.executable, "-m", "yt_dlp")


@dataclass(frozen=True, slots=True)
class YdlConfig:
    """
    Centralized yt-dlp invocation config.
    Tool locations live here and are passed to adapters explicitly.
    """

    command: tuple[str, ...] = field(default_factory=_default_command)
    ffmpeg_location: str | None = None

    # Request shaping
    user_agent: str = field(default_factory=_default_user_agent)
    referer: str | None = "https://www.youtube.com/"

    # Networking / robustness
    extract_timeout_sec: float | None = 45
    extract_socket_timeout_sec: int = 60
    merge_socket_timeout_sec: int = 120

    @classmethod
    def from_settings(cls, s: AppSettings) -> "YdlConfig":
        command = (s.ytdlp_binary,) if s.ytdlp_binary else _default_command()
        return cls(
            command=command,
            ffmpeg_location=s.ffmpeg_location,
            user_agent=s.user_agent or _default_user_agent(),
            referer=s.referer or None,
            extract_timeout_sec=s.extract_timeout_sec,
            extract_socket_timeout_sec=s.extract_socket_timeout_sec,
            merge_socket_timeout_sec=s.merge_socket_timeout_sec,
        )

    def muxer_available(self) -> bool:
        if self.ffmpeg_location:
            location = Path(self.ffmpeg_location)
            if location.is_dir():
                return any((location / name).exists() for name in ("ffmpeg", "ffmpeg.exe"))
            return location.exists()
        return shutil.which("ffmpeg") is not None
