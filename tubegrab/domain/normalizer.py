from __future__ import annotations

from collections.abc import Hashable

from .errors import ErrorKind, ExtractionError
from .languages import language_name
from .models import (
    CanonicalFormat,
    FormatCatalog,
    MediaCategory,
    RawStreamDescriptor,
    RawVideoInfo,
    SubtitleTrack,
)


MANIFEST_PROTOCOLS = frozenset({
    "m3u8",
    "m3u8_native",
    "http_dash_segments",
    "http_dash_segments_generator",
    "f4m",
    "ism",
})
MANIFEST_EXTS = frozenset({"m3u8", "mpd", "f4m", "ism"})
_MANIFEST_HINTS = ("hls", "m3u8")

_MB = 1024 * 1024


def format_duration(seconds: float | None) -> str:
    if not seconds:
        return "0:00"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def readable_size(size_bytes: int) -> str:
    return f"{size_bytes / _MB:.2f} MB"


def estimated_size(*, has_video: bool, height: int | None, abr: float | None) -> str:
    if has_video:
        h = height or 0
        if h >= 1080:
            return "45.00 MB"
        if h >= 720:
            return "25.00 MB"
        if h >= 480:
            return "15.00 MB"
        return "10.00 MB"
    if (abr or 0) >= 160:
        return "8.00 MB"
    return "5.00 MB"


def is_manifest_format(d: RawStreamDescriptor) -> bool:
    """Segmented/playlist formats cannot be fetched as one file."""
    if (d.protocol or "").lower() in MANIFEST_PROTOCOLS:
        return True
    if (d.container or "").lower() in MANIFEST_PROTOCOLS:
        return True
    if (d.ext or "").lower() in MANIFEST_EXTS:
        return True
    if d.url and ".m3u8" in d.url:
        return True
    for hint in (d.format_note, d.format, d.format_id):
        if hint and any(marker in hint.lower() for marker in _MANIFEST_HINTS):
            return True
    return False


def container_priority(d: RawStreamDescriptor) -> int:
    ext = (d.ext or "").lower()
    if d.has_video:
        return 1 if ext == "mp4" else 2 if ext == "webm" else 3
    return 1 if ext == "m4a" else 2 if ext == "mp3" else 3


def bitrate_tier(d: RawStreamDescriptor) -> int:
    return int(round(d.abr)) if d.abr else 0


def quality_label(d: RawStreamDescriptor) -> str:
    if d.has_video:
        if d.height:
            return f"{d.height}p"
        return d.format_note or MediaCategory.VIDEO.value
    if d.abr:
        return f"{bitrate_tier(d)}kbps"
    return "medium"


def dedup_key(d: RawStreamDescriptor) -> tuple[MediaCategory, Hashable, int]:
    if d.has_video:
        return MediaCategory.VIDEO, d.height or quality_label(d), container_priority(d)
    return MediaCategory.AUDIO, bitrate_tier(d), container_priority(d)


def _canonical(d: RawStreamDescriptor, fallback_id: str) -> CanonicalFormat:
    size = d.size_bytes
    if size:
        size_label = readable_size(size)
    else:
        size_label = estimated_size(has_video=d.has_video, height=d.height, abr=d.abr)

    return CanonicalFormat(
        format_id=d.format_id or fallback_id,
        quality=quality_label(d),
        ext="mp4" if d.has_video else "mp3",
        has_video=d.has_video,
        has_audio=d.has_audio,
        height=d.height,
        size_bytes=size,
        readable_size=size_label,
        source_url=d.url or "",
        width=d.width,
        fps=d.fps,
        vcodec=d.vcodec,
        acodec=d.acodec,
        abr=d.abr,
    )


def _mp3_entry(best_audio: CanonicalFormat) -> CanonicalFormat:
    abr = int(round(best_audio.abr)) if best_audio.abr else 128
    return CanonicalFormat(
        format_id=f"{best_audio.format_id}_mp3",
        quality=f"{abr}kbps MP3",
        ext="mp3",
        has_video=False,
        has_audio=True,
        height=None,
        size_bytes=best_audio.size_bytes,
        readable_size=best_audio.readable_size,
        source_url=best_audio.source_url,
        acodec=best_audio.acodec,
        abr=best_audio.abr,
        synthetic=True,
    )


def build_subtitle_tracks(raw: RawVideoInfo) -> list[SubtitleTrack]:
    tracks: list[SubtitleTrack] = []
    for code, entries in raw.subtitles.items():
        name = language_name(code)
        for entry in entries:
            if not entry.url:
                continue
            tracks.append(
                SubtitleTrack(
                    language_code=code,
                    language_name=name,
                    ext=entry.ext or "vtt",
                    direct_url=entry.url,
                    name=entry.name or "",
                )
            )
    return tracks


def normalize(raw: RawVideoInfo) -> FormatCatalog:
    """
    Collapse raw descriptors into one catalog entry per height (video)
    or bitrate tier (audio).

    The first descriptor to claim a height/bitrate after the reject filters
    wins. Container priority is part of the key but never breaks a tie.
    """
    title = (raw.title or "").strip()
    if not title:
        raise ExtractionError(
            ErrorKind.EXTRACTION_FAILED,
            "Could not extract video title. Please check the URL and try again.",
        )
    if not raw.formats:
        raise ExtractionError(ErrorKind.EXTRACTION_FAILED, "No formats found for this video.")

    claimed: set[tuple[MediaCategory, Hashable]] = set()
    videos: list[CanonicalFormat] = []
    audios: list[CanonicalFormat] = []

    for idx, d in enumerate(raw.formats):
        if not d.url:
            continue
        if is_manifest_format(d):
            continue
        if d.vcodec == "none" and d.acodec == "none":
            continue
        if not d.has_video and not d.has_audio:
            continue

        category, slot, _priority = dedup_key(d)
        if (category, slot) in claimed:
            continue
        claimed.add((category, slot))

        fmt = _canonical(d, fallback_id=f"fmt{idx}")
        if category is MediaCategory.VIDEO:
            videos.append(fmt)
        else:
            audios.append(fmt)

    if not videos and not audios:
        raise ExtractionError(
            ErrorKind.EXTRACTION_FAILED,
            "No directly downloadable formats found for this video.",
        )

    videos.sort(key=lambda f: f.height or 0, reverse=True)
    audios.sort(key=lambda f: f.abr or 0, reverse=True)
    if audios:
        audios.append(_mp3_entry(audios[0]))

    return FormatCatalog(
        title=title,
        thumbnail=raw.thumbnail,
        duration_label=format_duration(raw.duration_sec),
        video_formats=tuple(videos),
        audio_formats=tuple(audios),
        subtitle_tracks=tuple(build_subtitle_tracks(raw)),
    )
