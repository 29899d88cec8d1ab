"""ESLint checks for the application scripts.

Like webpack, eslint runs in node as `npx eslint`. `lint` checks every
configured pattern once. `watch` lints each file as it changes and keeps
watching when a file has problems.
"""

from __future__ import annotations

import os
import subprocess
import threading
from dataclasses import asdict, dataclass
from pathlib import Path

from ..runner import Runner
from ..runner.logging import get_logger, inspect
from ..runner.watch import Watcher


NAME = "eslint"
COMMAND = ("npx", "eslint")

log = get_logger(NAME)


@dataclass
class EslintConfig:
    watch: list[str]
    command: tuple[str, ...] = COMMAND
    cwd: Path = Path(".")
    delay: float = 0.05


def lint(config: EslintConfig, files: list[str] | None = None) -> None:
    """Lint `files`, or every configured pattern when none are given."""
    targets = [str(f) for f in files] if files else list(config.watch)
    subprocess.run([*config.command, *targets], cwd=config.cwd, check=True)


def lint_changed(config: EslintConfig, changed: list[str]) -> bool:
    files = [path for path in changed if os.path.isfile(path)]
    if not files:
        return True
    try:
        lint(config, files)
    except subprocess.CalledProcessError as e:
        log.warning("Lint failed (exit %d): %s", e.returncode, ", ".join(files))
        return False
    return True


def watch(config: EslintConfig, stopped: threading.Event) -> None:
    """Lint changed files until `stopped` is set."""
    watchers = [
        Watcher(Path(config.cwd) / pattern, lambda changed: lint_changed(config, changed), delay=config.delay)
        for pattern in config.watch
    ]
    try:
        for watcher in watchers:
            watcher.start()
        stopped.wait()
    finally:
        for watcher in watchers:
            watcher.stop()


def generator(runner: Runner, config: EslintConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        inspect(log, asdict(config))

    @runner.task(f"{prefix}lint{suffix}")
    def run_lint():
        """Check scripts with eslint."""
        lint(config)

    @runner.task(f"{prefix}watch{suffix}")
    def run_watch():
        """Lint scripts as they change until stopped."""
        watch(config, runner.stopped)
