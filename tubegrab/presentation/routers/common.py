from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import quote

from aiohttp import web
from yt_dlp.version import __version__ as extractor_version

from tubegrab.infrastructure.temp_storage import TempStorage

routes = web.RouteTableDef()


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "status": "ok",
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "extractorVersion": extractor_version,
        }
    )


@routes.get("/temp/{name}")
async def temp_file(request: web.Request) -> web.FileResponse:
    storage: TempStorage = request.app["temp_storage"]
    path = storage.resolve(request.match_info["name"])
    if path is None:
        raise web.HTTPNotFound(text="File not found or expired")

    filename = quote(request.query.get("filename") or path.name, safe="")
    return web.FileResponse(
        path,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )
