from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class MediaCategory(str, Enum):
    VIDEO = "Video"
    AUDIO = "Audio Only"


class StrategyName(str, Enum):
    EXTRACTOR = "extractor"
    MIRROR = "mirror"
    BROWSER = "browser"


@dataclass(frozen=True, slots=True)
class RawStreamDescriptor:
    """
    One format entry as reported by a source adapter.
    Every field may be missing; codecs use "none" for an absent stream.
    """
    format_id: str | None = None
    vcodec: str | None = None
    acodec: str | None = None
    ext: str | None = None
    height: int | None = None
    width: int | None = None
    fps: float | None = None
    abr: float | None = None
    filesize: int | None = None
    filesize_approx: int | None = None
    url: str | None = None
    protocol: str | None = None
    format_note: str | None = None
    format: str | None = None
    container: str | None = None

    @property
    def has_video(self) -> bool:
        return bool(self.vcodec) and self.vcodec != "none"

    @property
    def has_audio(self) -> bool:
        return bool(self.acodec) and self.acodec != "none"

    @property
    def size_bytes(self) -> int | None:
        return self.filesize or self.filesize_approx or None


@dataclass(frozen=True, slots=True)
class RawSubtitle:
    url: str | None
    ext: str | None = None
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RawVideoInfo:
    title: str | None
    thumbnail: str | None = None
    duration_sec: float | None = None
    formats: tuple[RawStreamDescriptor, ...] = ()
    subtitles: dict[str, tuple[RawSubtitle, ...]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CanonicalFormat:
    format_id: str
    quality: str
    ext: str
    has_video: bool
    has_audio: bool
    height: int | None
    size_bytes: int | None
    readable_size: str
    source_url: str

    # carried through for clients, not part of the identity
    width: int | None = None
    fps: float | None = None
    vcodec: str | None = None
    acodec: str | None = None
    abr: float | None = None
    synthetic: bool = False

    @property
    def category(self) -> MediaCategory:
        return MediaCategory.VIDEO if self.has_video else MediaCategory.AUDIO

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.has_video

    def to_dict(self) -> dict[str, Any]:
        return {
            "formatId": self.format_id,
            "quality": self.quality,
            "ext": self.ext,
            "hasVideo": self.has_video,
            "hasAudio": self.has_audio,
            "isVideoOnly": self.has_video and not self.has_audio,
            "isAudioOnly": self.is_audio_only,
            "formatType": self.category.value,
            "height": self.height,
            "width": self.width,
            "fps": self.fps,
            "vcodec": self.vcodec,
            "acodec": self.acodec,
            "abr": self.abr,
            "sizeBytes": self.size_bytes,
            "readableSize": self.readable_size,
            "sourceUrl": self.source_url,
        }


@dataclass(frozen=True, slots=True)
class SubtitleTrack:
    language_code: str
    language_name: str
    ext: str
    direct_url: str
    name: str = ""

    @property
    def format_label(self) -> str:
        label = self.ext.upper()
        if self.name:
            label += f" ({self.name})"
        return label

    def to_dict(self) -> dict[str, Any]:
        return {
            "languageCode": self.language_code,
            "languageName": self.language_name,
            "name": self.name,
            "ext": self.ext,
            "directUrl": self.direct_url,
            "formatLabel": self.format_label,
        }


@dataclass(frozen=True, slots=True)
class FormatCatalog:
    title: str
    thumbnail: str | None
    duration_label: str
    video_formats: tuple[CanonicalFormat, ...]
    audio_formats: tuple[CanonicalFormat, ...]
    subtitle_tracks: tuple[SubtitleTrack, ...] = ()

    def all_formats(self) -> tuple[CanonicalFormat, ...]:
        return self.video_formats + self.audio_formats

    def find(self, format_id: str) -> CanonicalFormat | None:
        for fmt in self.all_formats():
            if fmt.format_id == format_id:
                return fmt
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "thumbnail": self.thumbnail,
            "durationLabel": self.duration_label,
            "videoFormats": [f.to_dict() for f in self.video_formats],
            "audioFormats": [f.to_dict() for f in self.audio_formats],
            "subtitleTracks": [s.to_dict() for s in self.subtitle_tracks],
        }


@dataclass(frozen=True, slots=True)
class ExtractionAttempt:
    strategy: StrategyName
    url: str
    elapsed_sec: float
    info: RawVideoInfo | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.info is not None and self.error is None


@dataclass(slots=True)
class MergeJob:
    source_url: str
    video_format_id: str
    output_path: Path
    attempts: int = 0
    last_error: str | None = None
