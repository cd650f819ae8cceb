from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from loguru import logger

from tubegrab.domain.errors import CookiesError


MIN_COOKIE_FILE_BYTES = 100
MAX_UPLOAD_BYTES = 1024 * 1024
COOKIE_FIELDS = 7


@dataclass(frozen=True, slots=True)
class CookiesStatus:
    exists: bool
    valid: bool
    path: Path | None
    checked_paths: tuple[Path, ...]

    @property
    def message(self) -> str:
        if self.valid:
            return f"Valid cookies file found at {self.path}"
        if self.exists:
            return f"Cookies file found at {self.path} but it is not valid"
        return "No cookies file found. Checked paths: " + ", ".join(str(p) for p in self.checked_paths)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "cookiesExist": self.exists,
            "cookiesValid": self.valid,
            "cookiesPath": str(self.path) if self.valid and self.path else None,
            "checkedPaths": [str(p) for p in self.checked_paths],
            "message": self.message,
        }


def _is_cookie_line(line: str) -> bool:
    s = line.strip()
    if not s:
        return False
    if s.startswith("#") and not s.startswith("#HttpOnly_"):
        return False
    return len(line.rstrip("\r\n").split("\t")) >= COOKIE_FIELDS


def is_valid_cookies_file(path: Path) -> bool:
    """Netscape cookie jar: big enough and at least one tab-delimited cookie row."""
    try:
        if not path.is_file():
            return False
        if path.stat().st_size < MIN_COOKIE_FILE_BYTES:
            return False
        text = path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return False
    return any(_is_cookie_line(line) for line in text.splitlines())


class CookieFileManager:
    """
    Locates the optional credential file and accepts replacements.
    Read-mostly: adapters ask for the valid path on every call.
    """

    def __init__(self, *, primary: Path, search_paths: Sequence[Path] = ()) -> None:
        self._primary = primary
        seen: list[Path] = []
        for p in (primary, *search_paths):
            if p not in seen:
                seen.append(p)
        self._candidates = tuple(seen)

    @property
    def primary(self) -> Path:
        return self._primary

    def find_valid(self) -> CookiesStatus:
        first_existing: Path | None = None
        for candidate in self._candidates:
            if not candidate.exists():
                continue
            if is_valid_cookies_file(candidate):
                return CookiesStatus(exists=True, valid=True, path=candidate, checked_paths=self._candidates)
            if first_existing is None:
                first_existing = candidate

        return CookiesStatus(
            exists=first_existing is not None,
            valid=False,
            path=first_existing,
            checked_paths=self._candidates,
        )

    def valid_path(self) -> Path | None:
        status = self.find_valid()
        return status.path if status.valid else None

    def save_upload(self, data: bytes, *, filename: str | None, content_type: str | None) -> Path:
        is_text = (content_type or "").startswith("text/") or (filename or "").lower().endswith(".txt")
        if not is_text:
            raise CookiesError("Only text files are allowed.")
        if len(data) > MAX_UPLOAD_BYTES:
            raise CookiesError("Cookies file is too large (max 1 MB).")

        target = self._primary
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".cookies-", suffix=".txt", dir=target.parent)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            if not is_valid_cookies_file(tmp):
                raise CookiesError(
                    "The uploaded file is not a valid Netscape HTTP Cookie File. "
                    "Please make sure you're exporting cookies correctly."
                )
            os.replace(tmp, target)
        finally:
            if tmp.exists():
                tmp.unlink()

        logger.info("Cookies file replaced at {}", target)
        return target
