"""CSS aggregation.

Every installed component package ships prebuilt stylesheets under
`node_modules/<package>/css/<mode>.<resolution>.css`. This generator joins them,
in dependency declaration order, into one file per resolution.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import partial
from pathlib import Path
from typing import Iterable

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect
from ..runner.utils import read_package


NAME = "css"
BASE_MODULES = ("mag-app",)
COMPONENT_MARKER = "-component-"

log = get_logger(NAME)


@dataclass
class CssConfig:
    resolution: str
    out_file: Path
    mode: str = "release"
    cwd: Path = Path(".")


def component_modules(package: dict, base: Iterable[str] = BASE_MODULES) -> list[str]:
    modules = list(base)
    names = list(package.get("dependencies") or {}) + list(package.get("devDependencies") or {})
    for name in names:
        if COMPONENT_MARKER in name and name not in modules:
            modules.append(name)
    return modules


def source_files(config: CssConfig, modules: Iterable[str]) -> list[Path]:
    file_name = f"{config.mode}.{config.resolution}.css"
    return [Path(config.cwd) / "node_modules" / m / "css" / file_name for m in modules]


def build(config: CssConfig) -> None:
    modules = component_modules(read_package(config.cwd))
    paths = source_files(config, modules)
    # all reads must succeed before anything is written
    contents = tools.parallel([partial(p.read_text, encoding="utf-8") for p in paths])
    tools.write([(config.out_file, "\n".join(contents))], log)


def clear(config: CssConfig) -> None:
    tools.unlink([config.out_file], log)


def generator(runner: Runner, config: CssConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        """Print the CSS aggregation settings."""
        inspect(log, asdict(config))

    @runner.task(f"{prefix}build{suffix}")
    def run_build():
        """Concatenate component stylesheets."""
        build(config)

    @runner.task(f"{prefix}clear{suffix}")
    def run_clear():
        """Remove the concatenated stylesheet."""
        clear(config)
