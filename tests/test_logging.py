from __future__ import annotations

import logging
import sys

import pytest
from loguru import logger

from tubegrab.loader import logging as log_setup


@pytest.fixture()
def captured(monkeypatch, settings):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    monkeypatch.setattr(log_setup, "get_settings", lambda: settings)

    lines: list[str] = []
    yield lines

    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    logger.remove()
    logger.add(sys.stderr)


def test_stdlib_records_are_routed_through_loguru(captured):
    log_setup.setup_logging("INFO", sink=captured.append)

    logging.getLogger("tubegrab.infrastructure.yt.ydl_process").warning("yt-dlp exited with %s", 1)
    logging.getLogger("tubegrab.infrastructure.yt.ydl_process").debug("hidden")

    assert len(captured) == 1
    line = captured[0]
    assert "WARNING" in line
    assert "yt-dlp exited with 1" in line
    assert ":test_stdlib_records_are_routed_through_loguru:" in line


def test_debug_setting_lowers_the_level_and_pinned_loggers_stay_quiet(captured, settings, monkeypatch):
    monkeypatch.setattr(log_setup, "get_settings", lambda: settings.model_copy(update={"debug": True}))

    log_setup.setup_logging(sink=captured.append)

    logging.getLogger("lifecycle").debug("started temp_sweeper")
    logging.getLogger("aiohttp.access").info("GET /health 200")

    assert any("started temp_sweeper" in line for line in captured)
    assert not any("GET /health" in line for line in captured)
    assert logging.getLogger("aiohttp.access").level == logging.WARNING
