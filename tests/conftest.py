import sys
from pathlib import Path

import pytest


# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from tubegrab.config.settings import AppSettings  # noqa: E402
from tubegrab.domain.models import RawStreamDescriptor, RawVideoInfo  # noqa: E402


COOKIE_LINE = ".youtube.com\tTRUE\t/\tTRUE\t1999999999\tPREF\tf6=40000000&tz=Europe.Berlin\n"
COOKIES_TEXT = "# Netscape HTTP Cookie File\n# This is a generated file! Do not edit.\n\n" + COOKIE_LINE * 3


def video(format_id, height, *, ext="mp4", acodec="none", **kw) -> RawStreamDescriptor:
    fields = dict(vcodec="avc1.640028", url=f"https://media.example/{format_id}", protocol="https")
    fields.update(kw)
    return RawStreamDescriptor(format_id=format_id, acodec=acodec, ext=ext, height=height, **fields)


def audio(format_id, abr, *, ext="m4a", **kw) -> RawStreamDescriptor:
    fields = dict(vcodec="none", acodec="mp4a.40.2", url=f"https://media.example/{format_id}", protocol="https")
    fields.update(kw)
    return RawStreamDescriptor(format_id=format_id, ext=ext, abr=abr, **fields)


def raw_info(*formats, title="Test video", duration=212.0, subtitles=None) -> RawVideoInfo:
    return RawVideoInfo(
        title=title,
        thumbnail="https://i.example/thumb.jpg",
        duration_sec=duration,
        formats=tuple(formats),
        subtitles=subtitles or {},
    )


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        _env_file=None,
        temp_dir=tmp_path / "temp",
        cookies_file=tmp_path / "youtube-cookies.txt",
        cookies_search_paths=[],
        browser_fallback=False,
    )
