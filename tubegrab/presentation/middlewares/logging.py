from __future__ import annotations

import logging
import time

from aiohttp import web

from .errors import Handler


_logger = logging.getLogger("http")


@web.middleware
async def access_log_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    started = time.monotonic()
    response = await handler(request)
    _logger.debug(
        "%s %s -> %s (%.1f ms)",
        request.method, request.path, response.status, (time.monotonic() - started) * 1000,
    )
    return response
