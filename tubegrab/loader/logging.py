import inspect
import logging
import sys
from typing import Any

from loguru import logger

from tubegrab.config.settings import get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# stdlib loggers pinned to a fixed level regardless of LOG_LEVEL
PINNED_LEVELS = {
    "aiohttp.access": logging.WARNING,
    "playwright": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """Forwards stdlib records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None, *, sink: Any = sys.stdout) -> None:
    settings = get_settings()
    level = level or ("DEBUG" if settings.debug else settings.log_level)

    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    for name, pinned in PINNED_LEVELS.items():
        logging.getLogger(name).setLevel(pinned)

    logger.configure(
        handlers=[
            {
                "sink": sink,
                "level": level,
                "format": LOG_FORMAT,
                "backtrace": True,
                "diagnose": settings.debug,
            }
        ]
    )
    logger.debug("Logging configured at {}", level)
