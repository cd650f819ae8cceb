from __future__ import annotations

import asyncio

from aiohttp import web

from tubegrab.constants import MSG_COOKIES_UPLOADED, MSG_NO_COOKIES_FILE
from tubegrab.infrastructure.cookies import CookieFileManager

routes = web.RouteTableDef()

UPLOAD_FIELD = "cookiesFile"


@routes.get("/api/cookies/status")
async def cookies_status(request: web.Request) -> web.Response:
    cookies: CookieFileManager = request.app["cookies"]
    status = await asyncio.to_thread(cookies.find_valid)
    return web.json_response(status.to_dict())


@routes.post("/api/cookies/upload")
async def upload_cookies(request: web.Request) -> web.Response:
    form = await request.post()
    field = form.get(UPLOAD_FIELD)
    if not isinstance(field, web.FileField):
        return web.json_response({"success": False, "message": MSG_NO_COOKIES_FILE}, status=400)

    cookies: CookieFileManager = request.app["cookies"]
    data = field.file.read()
    path = await asyncio.to_thread(
        cookies.save_upload, data, filename=field.filename, content_type=field.content_type
    )
    return web.json_response({"success": True, "message": MSG_COOKIES_UPLOADED, "cookiesPath": str(path)})
