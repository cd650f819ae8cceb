from __future__ import annotations

from .errors import (
    CookiesError,
    DomainError,
    ErrorKind,
    ExtractionError,
    MergeError,
    RawFailure,
    StrategyFailure,
    ValidationError,
)
from .models import (
    CanonicalFormat,
    FormatCatalog,
    MediaCategory,
    RawStreamDescriptor,
    RawVideoInfo,
    StrategyName,
    SubtitleTrack,
)

__all__ = [
    "CanonicalFormat",
    "CookiesError",
    "DomainError",
    "ErrorKind",
    "ExtractionError",
    "FormatCatalog",
    "MediaCategory",
    "MergeError",
    "RawFailure",
    "RawStreamDescriptor",
    "RawVideoInfo",
    "StrategyFailure",
    "StrategyName",
    "SubtitleTrack",
    "ValidationError",
]
