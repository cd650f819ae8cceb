from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aiohttp import web

from .di import AsyncStartStop, Container
from .di import build_graph as build_di_graph


class LifecycleError(RuntimeError):
    pass


@dataclass(slots=True)
class AppLifecycle:
    """
    Owns the DI graph and the background components of one web app.

    build() runs before routes are wired; startup/shutdown are bound to the
    aiohttp signals by attach().
    """

    container: Container
    _built: bool = field(default=False, init=False)
    _running: list[tuple[str, AsyncStartStop]] = field(default_factory=list, init=False)
    _logger: logging.Logger = field(default_factory=lambda: logging.getLogger("lifecycle"), init=False)

    def build(self) -> None:
        if not self._built:
            build_di_graph(self.container)
            self._built = True

    def attach(self, app: web.Application) -> None:
        async def _on_startup(_: web.Application) -> None:
            await self.startup()

        async def _on_cleanup(_: web.Application) -> None:
            await self.shutdown()

        app.on_startup.append(_on_startup)
        app.on_cleanup.append(_on_cleanup)

    async def startup(self) -> None:
        if self._running:
            raise LifecycleError("startup() called twice")

        s = self.container.settings
        try:
            s.temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LifecycleError(f"TEMP_DIR is not writable: {s.temp_dir}") from exc
        self.build()

        for name, component in self.container.all_components():
            if not isinstance(component, AsyncStartStop):
                continue
            try:
                await component.start()
            except Exception as exc:
                await self.shutdown()
                raise LifecycleError(f"Component failed to start: {name}") from exc
            self._running.append((name, component))
            self._logger.info("started %s", name)

        cookies = self.container.get("cookies").find_valid()
        self._logger.info("cookies: %s", cookies.message)
        self._logger.info("muxer available: %s", self.container.get("merge_executor").muxer_available)

    async def shutdown(self) -> None:
        while self._running:
            name, component = self._running.pop()
            try:
                await component.stop()
            except Exception:
                self._logger.exception("failed to stop %s", name)
            else:
                self._logger.info("stopped %s", name)
