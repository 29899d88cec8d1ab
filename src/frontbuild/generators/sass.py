"""Sass compilation through libsass."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

import sass

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect


NAME = "sass"

log = get_logger(NAME)


@dataclass
class SassConfig:
    file: Path
    out_file: Path
    output_style: str = "compressed"
    source_map: Path | None = None
    include_paths: list[str] = field(default_factory=list)


def build(config: SassConfig) -> None:
    options = dict(
        filename=str(config.file),
        output_style=config.output_style,
        include_paths=[str(p) for p in config.include_paths],
    )
    if config.source_map:
        css, source_map = sass.compile(
            source_map_filename=str(config.source_map),
            output_filename_hint=str(config.out_file),
            **options,
        )
        tools.write([(config.out_file, css), (config.source_map, source_map)], log)
    else:
        tools.write([(config.out_file, sass.compile(**options))], log)


def clear(config: SassConfig) -> None:
    tools.unlink([p for p in (config.out_file, config.source_map) if p], log)


def generator(runner: Runner, config: SassConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        """Print the Sass settings."""
        inspect(log, asdict(config))

    @runner.task(f"{prefix}build{suffix}")
    def run_build():
        """Compile the Sass entry point."""
        build(config)

    @runner.task(f"{prefix}clear{suffix}")
    def run_clear():
        """Remove compiled CSS and its source map."""
        clear(config)
