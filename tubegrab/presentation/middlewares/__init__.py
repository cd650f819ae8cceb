from aiohttp import web

from .errors import error_middleware
from .logging import access_log_middleware


def setup_middlewares(app: web.Application) -> None:
    # outermost first
    app.middlewares.append(access_log_middleware)
    app.middlewares.append(error_middleware)
