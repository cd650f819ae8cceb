from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from .errors import ErrorKind, ExtractionError


def normalize_host(host: str) -> str:
    h = host.lower().strip(".")
    if h.startswith("www."):
        h = h[4:]
    return h


def host_matches(host: str, accepted: Iterable[str]) -> bool:
    h = normalize_host(host)
    for a in accepted:
        a = normalize_host(a)
        if h == a or h.endswith("." + a):
            return True
    return False


def validate_url(raw: str | None, accepted_hosts: Iterable[str]) -> str:
    """
    Returns the URL with an explicit scheme.
    Raises InvalidUrl before any adapter gets to see the value.
    """
    if not raw or not isinstance(raw, str):
        raise ExtractionError(ErrorKind.INVALID_URL, "Invalid URL provided. Please enter a valid video URL.")

    url = raw.strip()
    if " " in url or not url:
        raise ExtractionError(ErrorKind.INVALID_URL, "Invalid URL provided. Please enter a valid video URL.")
    if "://" not in url:
        url = "https://" + url

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        raise ExtractionError(ErrorKind.INVALID_URL, "URL must start with http:// or https://")

    try:
        parts.port
    except ValueError as exc:
        raise ExtractionError(ErrorKind.INVALID_URL, "Invalid URL provided. The port is not valid.") from exc

    host = parts.hostname or ""
    if not host or not host_matches(host, accepted_hosts):
        raise ExtractionError(ErrorKind.INVALID_URL, "Invalid video URL. This host is not supported.")

    if parts.path in ("", "/") and not parts.query:
        raise ExtractionError(ErrorKind.INVALID_URL, "Invalid video URL. The link does not point to a video.")

    return url
