from __future__ import annotations

import re

from .errors import ErrorKind, ExtractionError, RawFailure


_ERROR_LINE = re.compile(r"ERROR:\s*(.+?)(?:\n|$)")

# Checked in order; the first matching group decides the kind.
_RULES: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.INVALID_URL, ("invalid url", "not a valid url", "unsupported url", "invalid youtube url")),
    (ErrorKind.UNAVAILABLE, ("unavailable", "private")),
    (ErrorKind.REGION_RESTRICTED, ("region", "country")),
    (ErrorKind.AUTH_REQUIRED, ("authentication", "sign in", "login")),
    (ErrorKind.TIMEOUT, ("timed out",)),
)

_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_URL: "Invalid URL. Please enter a valid video URL.",
    ErrorKind.UNAVAILABLE: "This video is unavailable or private.",
    ErrorKind.REGION_RESTRICTED: "This video is not available in the server's region.",
    ErrorKind.AUTH_REQUIRED: "This video requires authentication. Please try a different URL or video.",
    ErrorKind.TIMEOUT: "The video source timed out. Please try again later.",
    ErrorKind.EXTRACTION_FAILED: "Failed to extract video information. Please check the URL and try again.",
}


def tool_error_line(stderr: str | None) -> str | None:
    if not stderr:
        return None
    m = _ERROR_LINE.search(stderr)
    if m is None:
        return None
    return m.group(1).strip() or None


def classify_kind(failure: RawFailure) -> ErrorKind:
    haystack = " ".join(p for p in (failure.message, failure.stderr) if p).lower()
    for kind, markers in _RULES:
        if kind is ErrorKind.TIMEOUT and failure.timed_out:
            return kind
        if any(m in haystack for m in markers):
            return kind
    return ErrorKind.EXTRACTION_FAILED


def classify(failure: RawFailure) -> ExtractionError:
    """Total mapping: every failure yields exactly one ExtractionError kind."""
    kind = classify_kind(failure)
    message = tool_error_line(failure.stderr)
    if message is None:
        # process failures without an ERROR: line get the stock message
        from_process = failure.returncode is not None or failure.timed_out
        message = _DEFAULT_MESSAGES[kind] if from_process or not failure.message else failure.message
    return ExtractionError(kind, message, raw_diagnostic=failure.stderr or None)


FORBIDDEN_MARKERS: tuple[str, ...] = (
    "http error 403",
    "403: forbidden",
    "403 forbidden",
    "temporarily blocked",
)


def is_forbidden(failure: RawFailure) -> bool:
    """Transient 'forbidden/blocked' responses that are worth retrying."""
    haystack = " ".join(p for p in (failure.message, failure.stderr) if p).lower()
    return any(m in haystack for m in FORBIDDEN_MARKERS)
