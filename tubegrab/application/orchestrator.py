from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from tubegrab.domain.classifier import classify
from tubegrab.domain.errors import ErrorKind, ExtractionError, RawFailure, StrategyFailure
from tubegrab.domain.models import ExtractionAttempt, FormatCatalog
from tubegrab.domain.normalizer import normalize
from tubegrab.infrastructure.platforms import AbstractExtractionStrategy, PlatformRegistry


@dataclass(frozen=True, slots=True)
class PlannedAttempt:
    strategy: AbstractExtractionStrategy
    url: str


@dataclass(frozen=True, slots=True)
class Resolution:
    url: str
    catalog: FormatCatalog
    attempts: tuple[ExtractionAttempt, ...]


def _as_raw_failure(exc: BaseException) -> RawFailure:
    if isinstance(exc, StrategyFailure):
        return exc.failure
    if isinstance(exc, ExtractionError):
        return RawFailure(message=exc.message, stderr=exc.raw_diagnostic)
    return RawFailure(message=str(exc) or exc.__class__.__name__)


class ExtractionOrchestrator:
    """
    URL -> FormatCatalog.

    Attempts run strictly in order: primary extractor on the literal URL,
    the mirror strategy on each registered mirror host, then the fallback
    strategy. The first attempt that normalizes into a catalog wins;
    results are never compared across strategies.
    """

    def __init__(
        self,
        *,
        registry: PlatformRegistry,
        primary: AbstractExtractionStrategy,
        mirror: AbstractExtractionStrategy | None = None,
        fallback: AbstractExtractionStrategy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._registry = registry
        self._primary = primary
        self._mirror = mirror
        self._fallback = fallback
        self._clock = clock

    def plan(self, url: str) -> list[PlannedAttempt]:
        steps = [PlannedAttempt(self._primary, url)]
        if self._mirror is not None:
            steps += [PlannedAttempt(self._mirror, m) for m in self._registry.mirror_urls(url)]
        if self._fallback is not None:
            steps.append(PlannedAttempt(self._fallback, url))
        return steps

    async def resolve(self, raw_url: str | None) -> FormatCatalog:
        resolution = await self.run(raw_url)
        return resolution.catalog

    async def run(self, raw_url: str | None) -> Resolution:
        url = self._registry.validate(raw_url)

        attempts: list[ExtractionAttempt] = []
        last_failure: RawFailure | None = None

        for step in self.plan(url):
            started = self._clock()
            try:
                raw = await step.strategy.resolve(step.url)
                catalog = normalize(raw)
            except (StrategyFailure, ExtractionError) as exc:
                error: Exception = exc
            except Exception as exc:
                logger.exception("Unexpected error in {} attempt for {}", step.strategy.name.value, step.url)
                error = exc
            else:
                attempt = ExtractionAttempt(step.strategy.name, step.url, self._clock() - started, info=raw)
                attempts.append(attempt)
                logger.info(
                    "[{}] resolved {} in {:.2f}s: {} video / {} audio formats",
                    attempt.strategy.value, step.url, attempt.elapsed_sec,
                    len(catalog.video_formats), len(catalog.audio_formats),
                )
                return Resolution(url=url, catalog=catalog, attempts=tuple(attempts))

            attempt = ExtractionAttempt(step.strategy.name, step.url, self._clock() - started, error=error)
            attempts.append(attempt)
            last_failure = _as_raw_failure(error)
            logger.warning(
                "[{}] failed for {} after {:.2f}s: {}",
                attempt.strategy.value, step.url, attempt.elapsed_sec, last_failure.message,
            )

        if last_failure is None:
            raise ExtractionError(ErrorKind.EXTRACTION_FAILED, "No extraction strategy was available.")
        err = classify(last_failure)
        logger.error("All {} extraction attempts failed for {}: {} ({})", len(attempts), url, err.kind.value, err.message)
        raise err
