from __future__ import annotations

import pytest

from tubegrab.application.orchestrator import ExtractionOrchestrator
from tubegrab.domain.errors import ErrorKind, ExtractionError, RawFailure, StrategyFailure
from tubegrab.domain.models import StrategyName
from tubegrab.infrastructure.platforms import AbstractExtractionStrategy, PlatformRegistry

from conftest import audio, raw_info, video


URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class ScriptedStrategy(AbstractExtractionStrategy):
    def __init__(self, name: StrategyName, outcomes, log: list):
        self.name = name
        self._outcomes = list(outcomes)
        self._log = log

    async def resolve(self, url):
        self._log.append((self.name, url))
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _failure(stderr: str) -> StrategyFailure:
    return StrategyFailure(RawFailure(message="metadata extraction failed with exit code 1", returncode=1, stderr=stderr))


def _orchestrator(log, *, primary, mirror=(), fallback=None, mirrors=None):
    registry = PlatformRegistry(
        accepted_hosts=["youtube.com", "youtu.be"],
        mirrors=mirrors if mirrors is not None else {"youtube.com": ["m.youtube.com", "music.youtube.com"]},
    )
    return ExtractionOrchestrator(
        registry=registry,
        primary=ScriptedStrategy(StrategyName.EXTRACTOR, primary, log),
        mirror=ScriptedStrategy(StrategyName.MIRROR, mirror, log),
        fallback=ScriptedStrategy(StrategyName.BROWSER, fallback, log) if fallback is not None else None,
    )


GOOD = raw_info(video("137", 1080), audio("140", 129.5))


async def test_invalid_url_never_reaches_an_adapter():
    log: list = []
    orchestrator = _orchestrator(log, primary=[GOOD])

    with pytest.raises(ExtractionError) as exc_info:
        await orchestrator.resolve("not-a-url")

    assert exc_info.value.kind is ErrorKind.INVALID_URL
    assert log == []


@pytest.mark.parametrize("raw", ["https://www.youtube.com:abc/watch?v=x", "https://www.youtube.com:99999/watch?v=x"])
async def test_malformed_port_is_invalid_url_before_any_adapter(raw):
    log: list = []
    orchestrator = _orchestrator(log, primary=[GOOD], mirror=[GOOD, GOOD], fallback=[GOOD])

    with pytest.raises(ExtractionError) as exc_info:
        await orchestrator.resolve(raw)

    assert exc_info.value.kind is ErrorKind.INVALID_URL
    assert log == []


async def test_empty_plan_is_extraction_failure(monkeypatch):
    log: list = []
    orchestrator = _orchestrator(log, primary=[GOOD])
    monkeypatch.setattr(orchestrator, "plan", lambda url: [])

    with pytest.raises(ExtractionError) as exc_info:
        await orchestrator.resolve(URL)

    assert exc_info.value.kind is ErrorKind.EXTRACTION_FAILED
    assert log == []


async def test_first_success_wins():
    log: list = []
    orchestrator = _orchestrator(log, primary=[GOOD], mirror=[GOOD, GOOD], fallback=[GOOD])

    resolution = await orchestrator.run(URL)

    assert log == [(StrategyName.EXTRACTOR, URL)]
    assert resolution.url == URL
    assert resolution.catalog.title == "Test video"
    assert [a.succeeded for a in resolution.attempts] == [True]


async def test_mirrors_run_in_order_before_fallback():
    log: list = []
    blocked = _failure("ERROR: HTTP Error 403: Forbidden")
    orchestrator = _orchestrator(
        log,
        primary=[blocked],
        mirror=[blocked, blocked],
        fallback=[raw_info(video("browser-0", None, vcodec="unknown", acodec="unknown"), title="Scraped")],
    )

    resolution = await orchestrator.run(URL)

    assert log == [
        (StrategyName.EXTRACTOR, URL),
        (StrategyName.MIRROR, "https://m.youtube.com/watch?v=dQw4w9WgXcQ"),
        (StrategyName.MIRROR, "https://music.youtube.com/watch?v=dQw4w9WgXcQ"),
        (StrategyName.BROWSER, URL),
    ]
    assert resolution.catalog.title == "Scraped"
    assert [f.format_id for f in resolution.catalog.video_formats] == ["browser-0"]
    assert [a.succeeded for a in resolution.attempts] == [False, False, False, True]


async def test_normalization_failure_moves_on_to_next_step():
    log: list = []
    only_manifests = raw_info(video("hls", 720, protocol="m3u8"))
    orchestrator = _orchestrator(log, primary=[only_manifests], mirror=[GOOD])

    catalog = await orchestrator.resolve(URL)

    assert len(log) == 2
    assert catalog.video_formats[0].format_id == "137"


async def test_last_failure_is_classified_and_raised():
    log: list = []
    orchestrator = _orchestrator(
        log,
        primary=[_failure("ERROR: Sign in to confirm you're not a bot")],
        mirror=[_failure("ERROR: HTTP Error 403: Forbidden"), _failure("ERROR: Video unavailable")],
    )

    with pytest.raises(ExtractionError) as exc_info:
        await orchestrator.resolve(URL)

    assert exc_info.value.kind is ErrorKind.UNAVAILABLE
    assert exc_info.value.message == "Video unavailable"
    assert len(log) == 3


async def test_unexpected_exception_counts_as_failed_attempt():
    log: list = []
    orchestrator = _orchestrator(log, primary=[RuntimeError("boom")], mirrors={})

    with pytest.raises(ExtractionError) as exc_info:
        await orchestrator.resolve("https://youtu.be/dQw4w9WgXcQ")

    assert exc_info.value.kind is ErrorKind.EXTRACTION_FAILED
    assert exc_info.value.message == "boom"


def test_plan_lists_every_step():
    log: list = []
    orchestrator = _orchestrator(log, primary=[], fallback=[])

    steps = [(s.strategy.name, s.url) for s in orchestrator.plan(URL)]

    assert steps == [
        (StrategyName.EXTRACTOR, URL),
        (StrategyName.MIRROR, "https://m.youtube.com/watch?v=dQw4w9WgXcQ"),
        (StrategyName.MIRROR, "https://music.youtube.com/watch?v=dQw4w9WgXcQ"),
        (StrategyName.BROWSER, URL),
    ]
