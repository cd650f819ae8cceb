from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from aiohttp import web
from loguru import logger

from tubegrab.constants import MSG_INTERNAL_ERROR
from tubegrab.domain.errors import CookiesError, ErrorKind, ExtractionError, ValidationError


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_URL: 400,
    ErrorKind.UNAVAILABLE: 404,
    ErrorKind.REGION_RESTRICTED: 403,
    ErrorKind.AUTH_REQUIRED: 403,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.EXTRACTION_FAILED: 500,
}

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def error_payload(message: str, code: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": message,
        "errorCode": code,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def error_response(message: str, code: str, *, status: int, details: Any = None) -> web.Response:
    return web.json_response(error_payload(message, code, details), status=status)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ExtractionError as e:
        status = STATUS_BY_KIND.get(e.kind, 500)
        logger.warning("{} {} -> {} {}: {}", request.method, request.path, status, e.kind.value, e.message)
        return error_response(e.message, e.kind.value, status=status, details=e.raw_diagnostic)
    except ValidationError as e:
        logger.info("{} {} -> 400 {}: {}", request.method, request.path, e.code, e)
        return error_response(str(e), e.code, status=400)
    except CookiesError as e:
        logger.warning("Cookies upload rejected: {}", e)
        body = error_payload(str(e), "INVALID_COOKIES")
        body.update(success=False, message=str(e))
        return web.json_response(body, status=400)
    except Exception as e:
        logger.exception("Unhandled error on {} {}", request.method, request.path)
        return error_response(MSG_INTERNAL_ERROR, "INTERNAL_ERROR", status=500, details=repr(e))
