"""Pug templating: pypugjs compiles the templates, Jinja2 renders them."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect


NAME = "pug"
EXTENSION = "pypugjs.ext.jinja.PyPugJSExtension"

log = get_logger(NAME)


@dataclass
class PugConfig:
    source: Path
    target: Path
    pretty: bool = True
    variables: dict = field(default_factory=dict)


def render(config: PugConfig) -> str:
    source = Path(config.source)
    env = Environment(loader=FileSystemLoader(str(source.parent)), extensions=[EXTENSION])
    env.extensions[EXTENSION].options = {"pretty": config.pretty}
    return env.get_template(source.name).render(**config.variables)


def build(config: PugConfig) -> None:
    tools.write([(config.target, render(config))], log)


def clear(config: PugConfig) -> None:
    tools.unlink([config.target], log)


def generator(runner: Runner, config: PugConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        inspect(
            log,
            {"source": config.source, "target": config.target, "pretty": config.pretty,
             "variables": sorted(config.variables)},
        )

    @runner.task(f"{prefix}build{suffix}")
    def run_build():
        """Render the HTML page."""
        build(config)

    @runner.task(f"{prefix}clear{suffix}")
    def run_clear():
        clear(config)
