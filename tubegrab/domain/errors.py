from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_URL = "INVALID_URL"
    UNAVAILABLE = "VIDEO_UNAVAILABLE"
    REGION_RESTRICTED = "REGION_RESTRICTED"
    AUTH_REQUIRED = "AUTHENTICATION_REQUIRED"
    TIMEOUT = "TIMEOUT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


class DomainError(Exception):
    """Base domain error shown to user as friendly message."""


class ExtractionError(DomainError):
    def __init__(self, kind: ErrorKind, message: str, raw_diagnostic: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.raw_diagnostic = raw_diagnostic

    def __repr__(self) -> str:
        return f"ExtractionError(kind={self.kind.value}, message={self.message!r})"


class MergeError(ExtractionError):
    def __init__(self, message: str, *, primary_diagnostic: str | None, fallback_diagnostic: str | None) -> None:
        parts = [p for p in (primary_diagnostic, fallback_diagnostic) if p]
        super().__init__(
            ErrorKind.EXTRACTION_FAILED,
            message,
            raw_diagnostic="\n---\n".join(parts) or None,
        )
        self.primary_diagnostic = primary_diagnostic
        self.fallback_diagnostic = fallback_diagnostic


class ValidationError(DomainError):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR") -> None:
        super().__init__(message)
        self.code = code


class CookiesError(DomainError):
    pass


@dataclass(frozen=True, slots=True)
class RawFailure:
    """
    Tool-specific failure as reported by an adapter.
    Converted into ExtractionError only by the classifier.
    """
    message: str
    returncode: int | None = None
    stderr: str | None = None
    timed_out: bool = False


class StrategyFailure(Exception):
    """Raised by extraction strategies and the merge runner; wraps a RawFailure."""

    def __init__(self, failure: RawFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @classmethod
    def from_message(cls, message: str) -> "StrategyFailure":
        return cls(RawFailure(message=message))
