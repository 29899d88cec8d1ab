"""Task wiring for library and application packages.

`library` registers what every package needs (bundling, linting, translations,
static and livereload servers, publishing). `application` adds the page
template and per-resolution stylesheets on top. Both finish with the same entry
points: `build`, `watch`, `serve` and `default`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from ..runner import Runner, tools
from ..runner.config import BuildConfig, define_constants, prepare_vars
from ..runner.logging import get_logger
from ..runner.utils import build_mode, platform_name, read_package, target_dir
from . import css, eslint, gettext, livereload, npm, pug, sass, static, webpack


RESOLUTIONS = ("480", "576", "720", "1080")
LANGUAGES = [
    "de", "el", "es", "fr", "it", "nl", "pl", "ru", "et",
    "lv", "sl", "uk", "hy", "ka", "bg", "tr", "pt",
]
GETTEXT_HEADER = [
    "/* This file is autogenerated by gettext:prepare task. */",
    "/* eslint-disable */",
    "",
]


@dataclass
class Layout:
    cwd: Path
    source: Path
    target: Path


def layout(config: BuildConfig) -> Layout:
    cwd = Path(config.cwd).resolve()
    return Layout(cwd=cwd, source=cwd / "src", target=target_dir(config.vars, cwd))


def gettext_js(package_config: dict) -> str:
    """JavaScript stub that exposes package strings to message extraction."""
    lines = list(GETTEXT_HEADER)
    for key in ("name", "description"):
        if package_config.get(key):
            lines.append(f"gettext({json.dumps(package_config[key], ensure_ascii=False)});")
    lines.append("")
    return "\n".join(lines)


def _common(runner: Runner, config: BuildConfig, paths: Layout, variables: dict) -> None:
    log = get_logger("app")
    package = read_package(paths.cwd)

    gettext.generator(
        runner,
        gettext.GettextConfig(
            languages=list(LANGUAGES),
            source=paths.source / "lang",
            target=paths.target / "lang",
            js_data=[paths.source / "js"],
            project=package.get("name", ""),
            version=package.get("version", ""),
            root=paths.cwd,
        ),
    )
    static.generator(runner, static.StaticConfig(open=paths.target))
    livereload.generator(
        runner,
        livereload.LivereloadConfig(
            watch=[str(paths.target / "**" / "*"), "!" + str(paths.target / "**" / "*.map")],
            root=paths.target,
            port=variables["LIVERELOAD"]["port"],
        ),
    )
    eslint.generator(runner, eslint.EslintConfig(watch=["src/js/**/*.js"], cwd=paths.cwd))
    webpack.generator(
        runner,
        webpack.WebpackConfig(
            config=webpack.make_config(
                source=paths.source,
                target=paths.target,
                define=define_constants(variables),
                develop=variables["DEVELOP"],
                platform=platform_name(config.vars),
                cwd=paths.cwd,
            ),
            config_file=paths.cwd / ".frontbuild" / "webpack.config.js",
            cwd=paths.cwd,
        ),
    )
    npm.generator(
        runner,
        npm.NpmConfig(
            target=paths.target,
            on_publish=lambda: {**read_package(paths.cwd), **config.package},
        ),
    )

    @runner.task("init")
    def init():
        """Create the build directory layout."""
        tools.mkdir([paths.target / "lang", paths.target / "css"], log)
        ignore = (paths.cwd / ".npmignore").read_text(encoding="utf-8")
        tools.write([(paths.target / ".npmignore", ignore)], log)
        runner.run("gettext:prepare")

    @runner.task("copy")
    def copy():
        """Copy images into the build directory."""
        tools.copy(paths.source / "img", paths.target / "img", log)

    @runner.task("gettext:prepare")
    def gettext_prepare():
        """Expose package name and description to translators."""
        package_config = read_package(paths.cwd).get("config") or {}
        tools.write([(paths.source / "js" / "gettext.js", gettext_js(package_config))], log)


def library(runner: Runner, config: BuildConfig) -> None:
    paths = layout(config)
    variables = prepare_vars(config.vars)
    _common(runner, config, paths, variables)

    runner.task("build", runner.parallel(
        "webpack:build", "copy",
        runner.serial("gettext:prepare", "gettext:build"),
    ), description="Build everything")

    @runner.task("watch")
    def watch():
        """Rebuild on changes until stopped."""
        runner.watch(str(paths.source / "img" / "**" / "*"), "copy")
        runner.watch(str(paths.cwd / "package*json"), "gettext:prepare")
        runner.run(runner.parallel("eslint:watch", "webpack:watch"))

    _entry_points(runner)


def application(runner: Runner, config: BuildConfig) -> None:
    paths = layout(config)
    variables = prepare_vars(config.vars)
    develop = variables["DEVELOP"]
    _common(runner, config, paths, variables)

    pug.generator(
        runner,
        pug.PugConfig(
            source=paths.source / "pug" / "main.pug",
            target=paths.target / "index.html",
            pretty=True,
            variables={**variables, "package": read_package(paths.cwd)},
        ),
    )

    for resolution in RESOLUTIONS:
        suffix = f":{resolution}"
        sass.generator(
            runner,
            sass.SassConfig(
                file=paths.source / "sass" / f"{build_mode(develop)}.{resolution}.scss",
                out_file=paths.target / "css" / f"app.{resolution}.css",
                output_style="nested" if develop else "compressed",
                source_map=paths.target / "css" / f"app.{resolution}.map",
                include_paths=[str(paths.cwd / "node_modules")],
            ),
            suffix=suffix,
        )
        css.generator(
            runner,
            css.CssConfig(
                resolution=resolution,
                out_file=paths.target / "css" / f"sdk.{resolution}.css",
                mode=build_mode(develop),
                cwd=paths.cwd,
            ),
            suffix=suffix,
        )

    runner.task("sass:build", runner.parallel(*[f"sass:build:{r}" for r in RESOLUTIONS]),
                description="Compile Sass for every resolution")
    runner.task("css:build", runner.parallel(*[f"css:build:{r}" for r in RESOLUTIONS]),
                description="Concatenate component CSS for every resolution")

    runner.task("build", runner.parallel(
        "pug:build", "sass:build", "css:build", "webpack:build", "copy",
        runner.serial("gettext:prepare", "gettext:build"),
    ), description="Build everything")

    @runner.task("watch")
    def watch():
        """Rebuild on changes until stopped."""
        runner.watch(str(paths.source / "pug" / "**" / "*.pug"), "pug:build")
        runner.watch(str(paths.source / "sass" / "**" / "*.scss"), "sass:build")
        runner.watch(str(paths.source / "img" / "**" / "*"), "copy")
        runner.watch(str(paths.cwd / "package*json"), runner.parallel("css:build", "gettext:prepare"))
        runner.run(runner.parallel("eslint:watch", "webpack:watch"))

    _entry_points(runner)


def _entry_points(runner: Runner) -> None:
    runner.task("serve", runner.parallel("static:start", "livereload:start"),
                description="Serve the build directory with live reload")
    runner.task("default", runner.serial("build", runner.parallel("watch", "serve")),
                description="Build, then watch and serve")


def generate(runner: Runner, config: BuildConfig) -> None:
    if config.type == "app":
        application(runner, config)
    else:
        library(runner, config)
