from aiohttp import web

from . import common, cookies, download


def setup_routers(app: web.Application) -> None:
    app.add_routes(common.routes)
    app.add_routes(download.routes)
    app.add_routes(cookies.routes)
