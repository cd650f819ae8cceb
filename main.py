import asyncio
import sys

from aiohttp import web
from loguru import logger

from tubegrab.constants import APP_NAME
from tubegrab.main_app import create_app
from tubegrab.config.settings import get_settings
from tubegrab.loader.logging import setup_logging


def main():
    if sys.platform != "win32":
        import uvloop

        uvloop.install()
    setup_logging()
    settings = get_settings()

    logger.info("Starting {} on {}:{}", APP_NAME, settings.webapp_host, settings.webapp_port)

    async def _run():
        app = await create_app()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, host=settings.webapp_host, port=settings.webapp_port)
        await site.start()
        logger.info("App started")
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            await runner.cleanup()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
