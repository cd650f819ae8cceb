from __future__ import annotations

from typing import Iterable

import aiohttp_cors
from aiohttp import web
from loguru import logger

from tubegrab.di import Container
from tubegrab.infrastructure.cookies import MAX_UPLOAD_BYTES
from tubegrab.lifecycle import AppLifecycle
from tubegrab.presentation.middlewares import setup_middlewares
from tubegrab.presentation.routers import setup_routers

# components the handlers read from the app
EXPOSED = ("download_service", "cookies", "temp_storage")


def setup_cors(app: web.Application, origins: Iterable[str]) -> None:
    options = aiohttp_cors.ResourceOptions(
        allow_credentials=False,
        expose_headers="*",
        allow_headers="*",
        allow_methods=["GET", "POST"],
    )
    cors = aiohttp_cors.setup(app, defaults={origin: options for origin in origins})
    for route in list(app.router.routes()):
        if route.resource is not None and route.resource.canonical.startswith("/api/"):
            cors.add(route)


def create_web_app(container: Container, lifecycle: AppLifecycle | None = None) -> web.Application:
    settings = container.settings
    # multipart overhead on top of the cookie file itself
    app = web.Application(client_max_size=MAX_UPLOAD_BYTES + 64 * 1024)

    app["settings"] = settings
    for name in EXPOSED:
        app[name] = container.get(name)

    setup_middlewares(app)
    setup_routers(app)
    setup_cors(app, settings.cors_origins)

    if lifecycle is not None:
        lifecycle.attach(app)

    logger.info("Web app created with {} routes", len(app.router.routes()))
    return app
