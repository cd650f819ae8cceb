from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit, urlunsplit

from tubegrab.domain.validators import normalize_host, validate_url


class PlatformRegistry:
    """
    Accepted hosts + mirror domains.
    Stateless after construction and deterministic.
    """

    def __init__(self, *, accepted_hosts: Iterable[str], mirrors: Mapping[str, Iterable[str]] | None = None) -> None:
        self._accepted = tuple(normalize_host(h) for h in accepted_hosts)
        self._mirrors = {normalize_host(k): tuple(v) for k, v in (mirrors or {}).items()}

    @property
    def accepted_hosts(self) -> tuple[str, ...]:
        return self._accepted

    def validate(self, raw_url: str | None) -> str:
        return validate_url(raw_url, self._accepted)

    def mirrors_for(self, host: str) -> tuple[str, ...]:
        return self._mirrors.get(normalize_host(host), ())

    def mirror_urls(self, url: str) -> list[str]:
        """Same URL with the host swapped for each registered mirror, in declared order."""
        parts = urlsplit(url)
        host = parts.hostname or ""
        out: list[str] = []
        for mirror in self.mirrors_for(host):
            netloc = mirror if parts.port is None else f"{mirror}:{parts.port}"
            out.append(urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment)))
        return out
