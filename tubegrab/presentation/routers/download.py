from __future__ import annotations

import json
from typing import Any

from aiohttp import web

from tubegrab.application.services import DownloadService
from tubegrab.constants import MSG_INVALID_JSON, MSG_NO_FORMAT_ID, MSG_NO_URL
from tubegrab.domain.errors import ValidationError
from tubegrab.presentation.links import base_url, download_link

routes = web.RouteTableDef()


async def _json_body(request: web.Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError(MSG_INVALID_JSON, code="INVALID_JSON") from None
    if not isinstance(data, dict):
        raise ValidationError(MSG_INVALID_JSON, code="INVALID_JSON")
    return data


def _required(body: dict[str, Any], key: str, message: str) -> Any:
    value = body.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message, code="MISSING_PARAMETER")
    return value


@routes.post("/api/download")
async def list_formats(request: web.Request) -> web.Response:
    body = await _json_body(request)
    url = _required(body, "url", MSG_NO_URL)

    service: DownloadService = request.app["download_service"]
    catalog = await service.get_catalog(url)
    return web.json_response(catalog.to_dict())


@routes.post("/api/download/merged")
async def download_merged(request: web.Request) -> web.Response:
    body = await _json_body(request)
    url = _required(body, "url", MSG_NO_URL)
    format_id = str(_required(body, "videoFormatId", MSG_NO_FORMAT_ID))

    service: DownloadService = request.app["download_service"]
    prepared = await service.prepare_download(url, format_id)

    link = download_link(prepared, base_url(request, request.app["settings"].public_base_url))
    return web.json_response(
        {
            "success": True,
            "message": "Video ready for download",
            "downloadUrl": link,
            "title": prepared.title,
            "fileSize": prepared.file_size,
            "ext": prepared.ext,
            "delivery": prepared.kind.value,
        }
    )
