"""Webpack bundling.

The bundler itself runs in node: this module only assembles its configuration,
renders it to a `webpack.config.js` and starts `npx webpack` on it.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jinja2 import Environment, PackageLoader

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect


NAME = "webpack"
COMMAND = ("npx", "webpack")

# Platform builds swap the base application package for a vendor one
BASE_APP_PATTERN = r"node_modules/mag-app/index\.js"
REPLACEMENTS = {
    "tizen": "tzn-app",
    "webos": "webos-app",
    "smarttv": "stv-app",
}

# Debug helpers stripped from release bundles
PURE_FUNCS = [
    "debug.assert",
    "debug.log",
    "debug.info",
    "debug.warn",
    "debug.fail",
    "debug.inspect",
    "debug.event",
    "debug.stub",
    "debug.time",
    "debug.timeEnd",
]

log = get_logger(NAME)


def minimizer_options() -> dict:
    return {
        "sourceMap": True,
        "uglifyOptions": {
            "output": {"comments": False},
            "compress": {
                "warnings": False,
                "unused": True,
                "dead_code": True,
                "drop_console": True,
                "drop_debugger": True,
                "properties": False,
                "pure_funcs": PURE_FUNCS,
            },
        },
    }


def make_config(
    source: Path,
    target: Path,
    define: Mapping[str, str],
    develop: bool = False,
    platform: str | None = None,
    cwd: Path = Path("."),
) -> dict:
    """Build the webpack configuration mapping for a source/target pair."""
    source = Path(source).resolve()
    config = {
        "mode": "development" if develop else "production",
        "devtool": "source-map",
        "entry": str(source / "js" / "main.js"),
        "output": {"filename": "main.js", "path": str(Path(target).resolve())},
        "resolve": {
            "alias": {
                "app:metrics": str(source / "js" / "metrics.js"),
                "app:config": str(source / "js" / "config.js"),
            }
        },
        "watchOptions": {"aggregateTimeout": 50},
        "define": dict(define),
        "replace": None,
        "minimizer": None if develop else minimizer_options(),
    }
    vendor = REPLACEMENTS.get(platform or "")
    if vendor:
        config["replace"] = {
            "pattern": BASE_APP_PATTERN,
            "target": str(Path(cwd).resolve() / "node_modules" / vendor / "index.js"),
        }
    return config


def render(config: dict) -> str:
    env = Environment(loader=PackageLoader("frontbuild.generators", "templates"), keep_trailing_newline=True)
    return env.get_template("webpack.config.js.j2").render(config=config)


@dataclass
class WebpackConfig:
    config: dict
    config_file: Path
    command: tuple[str, ...] = COMMAND
    cwd: Path = Path(".")


def _args(options: WebpackConfig, *extra: str) -> list[str]:
    return [*options.command, "--config", str(options.config_file), *extra]


def build(options: WebpackConfig) -> None:
    tools.write([(options.config_file, render(options.config))], log)
    subprocess.run(_args(options), cwd=options.cwd, check=True)


def watch(options: WebpackConfig, stopped) -> None:
    """Run webpack in watch mode until `stopped` is set or webpack exits."""
    tools.write([(options.config_file, render(options.config))], log)
    proc = subprocess.Popen(_args(options, "--watch"), cwd=options.cwd)
    try:
        while proc.poll() is None:
            if stopped.wait(0.5):
                break
    finally:
        if proc.poll() is None:
            proc.terminate()
            proc.wait()
    if proc.returncode and not stopped.is_set():
        raise subprocess.CalledProcessError(proc.returncode, proc.args)


def clear(options: WebpackConfig) -> None:
    out = Path(options.config["output"]["path"]) / options.config["output"]["filename"]
    tools.unlink([out, out.with_name(out.name + ".map"), options.config_file], log)


def generator(runner: Runner, options: WebpackConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        """Print the webpack configuration."""
        inspect(log, options.config)

    @runner.task(f"{prefix}build{suffix}")
    def run_build():
        """Bundle the application script."""
        build(options)

    @runner.task(f"{prefix}watch{suffix}")
    def run_watch():
        """Rebundle on source changes until stopped."""
        watch(options, runner.stopped)

    @runner.task(f"{prefix}clear{suffix}")
    def run_clear():
        clear(options)
