from aiohttp import web

from tubegrab.config.settings import AppSettings
from tubegrab.di import Container
from tubegrab.lifecycle import AppLifecycle
from tubegrab.loader.web import create_web_app


async def create_app(settings: AppSettings | None = None) -> web.Application:
    container = Container.build(settings)
    lifecycle = AppLifecycle(container)
    lifecycle.build()
    app = create_web_app(container, lifecycle)
    return app
