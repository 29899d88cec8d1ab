# tests/test_watch.py

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from frontbuild.runner import Runner
from frontbuild.runner.watch import Watcher, matches, watch_root


@pytest.mark.parametrize(
    "pattern, root",
    [
        ("/repo/src/pug/**/*.pug", Path("/repo/src/pug")),
        ("/repo/package*json", Path("/repo")),
        ("/repo/src/img/logo.png", Path("/repo/src/img")),
        ("*.js", Path(".")),
    ],
)
def test_watch_root(pattern: str, root: Path) -> None:
    assert watch_root(pattern) == root


def test_matches_double_star_includes_top_level() -> None:
    pattern = "/repo/src/sass/**/*.scss"

    assert matches("/repo/src/sass/release.720.scss", pattern)
    assert matches("/repo/src/sass/parts/button.scss", pattern)
    assert not matches("/repo/src/sass/readme.md", pattern)
    assert not matches("/repo/src/pug/main.scss", pattern)


def test_matches_package_files() -> None:
    assert matches("/repo/package.json", "/repo/package*json")
    assert matches("/repo/package-lock.json", "/repo/package*json")
    assert not matches("/repo/build.yaml", "/repo/package*json")


def test_trigger_coalesces_bursts(tmp_path: Path) -> None:
    calls: list[list[str]] = []
    done = threading.Event()

    def callback(changed):
        calls.append(changed)
        done.set()

    watcher = Watcher(tmp_path / "*.txt", callback, delay=0.05)
    for name in ("b.txt", "a.txt", "b.txt", "c.txt", "a.txt"):
        watcher.trigger(str(tmp_path / name))

    assert done.wait(2)
    time.sleep(0.1)
    assert calls == [[str(tmp_path / n) for n in ("a.txt", "b.txt", "c.txt")]]
    watcher.stop()


def test_runner_watch_runs_task_on_change(runner: Runner, tmp_path: Path) -> None:
    ran = threading.Event()
    runner.task("rebuild", ran.set)

    runner.watch(str(tmp_path / "**" / "*.scss"), "rebuild", delay=0.01)
    time.sleep(0.2)
    (tmp_path / "main.scss").write_text("a { color: red; }", encoding="utf-8")

    assert ran.wait(5)


def test_failed_rebuild_keeps_watching(runner: Runner) -> None:
    def bad():
        raise RuntimeError("compile error")

    runner.task("bad", bad)

    # logged, not raised
    runner._run_watched("bad")
