from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class DeliveryKind(str, Enum):
    MERGED = "merged"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class PreparedDownload:
    """
    Result of a download request, before the HTTP layer decorates it into a URL.
    MERGED carries a local file; DIRECT carries the source media URL.
    """
    kind: DeliveryKind
    format_id: str
    title: str
    ext: str
    file_size: str
    file_path: Path | None = None
    direct_url: str | None = None
