from __future__ import annotations

import os
from pathlib import Path

from tubegrab.infrastructure.temp_storage import TempStorage, TempSweeper, safe_title


class Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_safe_title():
    assert safe_title('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
    assert safe_title("   ") == "video"
    assert len(safe_title("x" * 500)) == 150


def test_output_paths_never_collide(tmp_path: Path):
    storage = TempStorage(root=tmp_path / "temp", clock=Clock(1700000000.0))

    first = storage.output_path("Clip")
    first.write_bytes(b"1")
    second = storage.output_path("Clip")

    assert first.name == "Clip_1700000000000.mp4"
    assert second.name == "Clip_1700000000001.mp4"
    assert storage.output_path("Clip", suffix="_fallback").name == "Clip_1700000000000_fallback.mp4"


def test_resolve_only_returns_direct_children(tmp_path: Path):
    storage = TempStorage(root=tmp_path / "temp")
    path = storage.output_path("Clip")
    path.write_bytes(b"1")
    (tmp_path / "secret.txt").write_text("s")

    assert storage.resolve(path.name) == path
    assert storage.resolve("../secret.txt") is None
    assert storage.resolve("..") is None
    assert storage.resolve("missing.mp4") is None


def test_sweep_removes_only_old_files(tmp_path: Path):
    clock = Clock(1700000000.0)
    storage = TempStorage(root=tmp_path / "temp", clock=clock)
    old = storage.output_path("old")
    old.write_bytes(b"1")
    fresh = storage.output_path("fresh")
    fresh.write_bytes(b"1")
    os.utime(old, (clock.now - 3600, clock.now - 3600))
    os.utime(fresh, (clock.now - 60, clock.now - 60))

    assert storage.sweep(max_age_sec=30 * 60) == 1
    assert not old.exists()
    assert fresh.exists()


def test_sweep_creates_missing_root(tmp_path: Path):
    storage = TempStorage(root=tmp_path / "later")
    assert storage.sweep(max_age_sec=1) == 0
    assert storage.root.is_dir()


async def test_sweeper_run_once_and_stop(tmp_path: Path):
    clock = Clock(1700000000.0)
    storage = TempStorage(root=tmp_path / "temp", clock=clock)
    old = storage.output_path("old")
    old.write_bytes(b"1")
    os.utime(old, (clock.now - 7200, clock.now - 7200))

    sweeper = TempSweeper(storage=storage, max_age_sec=1800, interval_sec=3600)
    assert await sweeper.run_once() == 1

    await sweeper.start()
    await sweeper.stop()
    await sweeper.stop()
