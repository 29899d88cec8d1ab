"""Publishing the build directory as an npm package."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect


NAME = "npm"
COMMAND = ("npm",)

log = get_logger(NAME)


@dataclass
class NpmConfig:
    target: Path
    # returns the package.json data to publish
    on_publish: Callable[[], dict]
    command: tuple[str, ...] = COMMAND


def prepare(config: NpmConfig) -> dict:
    data = config.on_publish()
    tools.write([(Path(config.target) / "package.json", json.dumps(data, indent=2) + "\n")], log)
    return data


def publish(config: NpmConfig) -> None:
    data = prepare(config)
    log.info("Publishing %s@%s", data.get("name"), data.get("version"))
    subprocess.run([*config.command, "publish", str(config.target)], check=True)


def generator(runner: Runner, config: NpmConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        """Print the package.json that would be published."""
        inspect(log, config.on_publish())

    @runner.task(f"{prefix}prepare{suffix}")
    def run_prepare():
        """Write package.json into the build directory."""
        prepare(config)

    @runner.task(f"{prefix}publish{suffix}")
    def run_publish():
        publish(config)
