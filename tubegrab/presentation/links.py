from __future__ import annotations

import time

from aiohttp import web
from yarl import URL

from tubegrab.application.dto import DeliveryKind, PreparedDownload
from tubegrab.infrastructure.temp_storage import safe_title


def base_url(request: web.Request, public_base_url: str | None) -> URL:
    if public_base_url:
        return URL(public_base_url.rstrip("/"))
    return request.url.origin()


def download_link(prepared: PreparedDownload, base: URL, *, now: float | None = None) -> str:
    """
    Merged files are served from /temp on this host; direct links point at
    the source and carry a download hint for the client.
    """
    stamp = str(int((time.time() if now is None else now) * 1000))
    query = {
        "title": prepared.title,
        "filename": f"{safe_title(prepared.title)}.{prepared.ext}",
        "_t": stamp,
    }

    if prepared.kind is DeliveryKind.MERGED:
        assert prepared.file_path is not None
        return str((base / "temp" / prepared.file_path.name).with_query(query))

    assert prepared.direct_url is not None
    # the source query is signed and must stay byte-identical
    extra = URL.build(query={**query, "download": "1"}).raw_query_string
    sep = "&" if "?" in prepared.direct_url else "?"
    return f"{prepared.direct_url}{sep}{extra}"
