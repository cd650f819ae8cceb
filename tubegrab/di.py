from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .application.merge_executor import MergeExecutor
from .application.orchestrator import ExtractionOrchestrator
from .application.services import DownloadService
from .config.settings import AppSettings, get_settings
from .domain.models import StrategyName
from .domain.retry import BackoffPolicy
from .infrastructure.browser.scraper import BrowserScraper
from .infrastructure.cookies import CookieFileManager
from .infrastructure.platforms import BrowserStrategy, ExtractorStrategy, PlatformRegistry
from .infrastructure.temp_storage import TempStorage, TempSweeper
from .infrastructure.yt import YdlClient, YdlConfig


class DIError(RuntimeError):
    pass


@runtime_checkable
class AsyncStartStop(Protocol):
    async def start(self) -> None: ...
    async def stop(self) -> None: ...


@dataclass(slots=True)
class Container:
    """Named components built from one settings object."""

    settings: AppSettings
    _components: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(cls, settings: AppSettings | None = None) -> "Container":
        return cls(settings=settings or get_settings())

    def register(self, name: str, component: Any) -> None:
        if not name or not name.strip():
            raise DIError("Component name must be non-empty")
        if name in self._components:
            raise DIError(f"Component already registered: {name}")
        self._components[name] = component

    def get(self, name: str) -> Any:
        try:
            return self._components[name]
        except KeyError as exc:
            raise DIError(f"Unknown component: {name}") from exc

    def all_components(self) -> list[tuple[str, Any]]:
        return list(self._components.items())


def build_graph(container: Container, *, ydl: YdlClient | None = None) -> None:
    """
    Build the whole dependency graph.
    Any init error must crash at startup.
    """

    s = container.settings

    # Shared resources
    temp_storage = TempStorage(root=s.temp_dir)
    sweeper = TempSweeper(
        storage=temp_storage,
        max_age_sec=s.temp_max_age_min * 60,
        interval_sec=s.cleanup_interval_sec,
    )
    cookies = CookieFileManager(primary=s.cookies_file, search_paths=s.cookies_search_paths)

    # Media tools
    ydl_cfg = YdlConfig.from_settings(s)
    ydl = ydl or YdlClient(cfg=ydl_cfg)

    # Extraction strategies
    registry = PlatformRegistry(accepted_hosts=s.accepted_hosts, mirrors=s.mirror_domains)
    extract_policy = BackoffPolicy(max_retries=s.extract_retries, base_delay=2.0, factor=2.0)
    primary = ExtractorStrategy(ydl=ydl, cookies=cookies, retry_policy=extract_policy)
    mirror = ExtractorStrategy(ydl=ydl, cookies=cookies, retry_policy=extract_policy, name=StrategyName.MIRROR)
    fallback = None
    if s.browser_fallback:
        fallback = BrowserStrategy(
            scraper=BrowserScraper(timeout_sec=s.browser_timeout_sec, user_agent=ydl.config.user_agent)
        )

    orchestrator = ExtractionOrchestrator(registry=registry, primary=primary, mirror=mirror, fallback=fallback)
    merger = MergeExecutor(
        ydl=ydl,
        storage=temp_storage,
        cookies=cookies,
        policy=BackoffPolicy(
            max_retries=s.merge_retries,
            base_delay=s.merge_backoff_base_sec,
            factor=s.merge_backoff_factor,
        ),
    )
    downloads = DownloadService(orchestrator=orchestrator, merger=merger)

    # Register (order does not matter, lifecycle start order will be applied by lifecycle)
    container.register("temp_storage", temp_storage)
    container.register("temp_sweeper", sweeper)
    container.register("cookies", cookies)
    container.register("platform_registry", registry)
    container.register("orchestrator", orchestrator)
    container.register("merge_executor", merger)
    container.register("download_service", downloads)
