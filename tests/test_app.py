# tests/test_app.py

from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import pytest

from frontbuild.generators import app as app_gen
from frontbuild.generators import generate
from frontbuild.runner import Runner
from frontbuild.runner.config import BuildConfig


RESOLUTION_TASKS = [
    f"{family}:{action}:{r}"
    for family in ("sass", "css")
    for action in ("config", "build", "clear")
    for r in app_gen.RESOLUTIONS
]


def test_application_registers_all_tasks(runner: Runner, app_config: BuildConfig) -> None:
    generate(runner, app_config)

    expected = {
        "init", "copy", "build", "watch", "serve", "default",
        "gettext:prepare", "gettext:po", "gettext:json", "gettext:build",
        "webpack:build", "webpack:watch", "static:start", "npm:publish",
        "livereload:start", "eslint:lint", "eslint:watch",
        "pug:build", "sass:build", "css:build",
        *RESOLUTION_TASKS,
    }
    assert expected <= set(runner.tasks)
    runner.validate()


def test_application_composites(runner: Runner, app_config: BuildConfig) -> None:
    app_gen.application(runner, app_config)

    assert runner.dependencies("css:build") == [f"css:build:{r}" for r in app_gen.RESOLUTIONS]
    assert runner.dependencies("build") == [
        "pug:build", "sass:build", "css:build", "webpack:build", "copy",
        "gettext:prepare", "gettext:build",
    ]
    assert runner.dependencies("serve") == ["static:start", "livereload:start"]
    assert runner.dependencies("default") == ["build", "watch", "serve"]


def test_library_skips_page_and_styles(runner: Runner, app_config: BuildConfig) -> None:
    app_config.type = "lib"
    generate(runner, app_config)

    assert not any(name.split(":")[0] in ("pug", "sass", "css") for name in runner.tasks)
    assert runner.dependencies("build") == ["webpack:build", "copy", "gettext:prepare", "gettext:build"]
    runner.validate()


def test_build_runs_every_member(runner: Runner, app_config: BuildConfig) -> None:
    app_gen.application(runner, app_config)
    calls: list[str] = []
    lock = threading.Lock()

    def record(name):
        def fn():
            with lock:
                calls.append(name)
        return fn

    for name in ("pug:build", "webpack:build", "copy", "gettext:prepare", "gettext:build",
                 *[f"{f}:build:{r}" for f in ("sass", "css") for r in app_gen.RESOLUTIONS]):
        runner.task(name, record(name))

    runner.run("build")

    assert len(calls) == 5 + 2 * len(app_gen.RESOLUTIONS)
    assert calls.index("gettext:prepare") < calls.index("gettext:build")


def test_target_directory_follows_platform(app_config: BuildConfig) -> None:
    paths = app_gen.layout(app_config)

    assert paths.target == Path(app_config.cwd).resolve() / "build" / "mag"
    assert paths.source == Path(app_config.cwd).resolve() / "src"


def test_gettext_js_escapes_strings() -> None:
    text = app_gen.gettext_js({"name": 'My "TV"', "description": ""})

    assert 'gettext("My \\"TV\\"");' in text
    assert text.startswith("/* This file is autogenerated")
    assert text.count("gettext(") == 1


def test_init_prepares_target(runner: Runner, app_config: BuildConfig) -> None:
    app_gen.application(runner, app_config)
    target = app_gen.layout(app_config).target

    runner.run("init")

    assert (target / "lang").is_dir()
    assert (target / "css").is_dir()
    assert (target / ".npmignore").read_text(encoding="utf-8") == "*.map\n"
    gettext_js = (Path(app_config.cwd) / "src" / "js" / "gettext.js").read_text(encoding="utf-8")
    assert 'gettext("Demo");' in gettext_js
    assert 'gettext("Demo application");' in gettext_js


def test_init_fails_without_npmignore(runner: Runner, app_config: BuildConfig) -> None:
    (Path(app_config.cwd) / ".npmignore").unlink()
    app_gen.application(runner, app_config)

    with pytest.raises(FileNotFoundError):
        runner.run("init")


def test_copy_images(runner: Runner, app_config: BuildConfig) -> None:
    (Path(app_config.cwd) / "src" / "img" / "logo.png").write_bytes(b"png")
    app_gen.library(runner, app_config)

    runner.run("copy")

    assert (app_gen.layout(app_config).target / "img" / "logo.png").read_bytes() == b"png"


def test_publish_merges_package_overrides(runner: Runner, app_config: BuildConfig) -> None:
    app_gen.library(runner, app_config)

    runner.run("npm:prepare")

    data = json.loads((app_gen.layout(app_config).target / "package.json").read_text(encoding="utf-8"))
    assert data["name"] == "demo-app-release"
    assert data["version"] == "1.2.3"


def test_livereload_watches_target_without_maps(runner: Runner, app_config: BuildConfig, monkeypatch) -> None:
    captured = {}
    original = app_gen.livereload.generator

    def capture(runner, config, **kwargs):
        captured["config"] = config
        original(runner, config, **kwargs)

    monkeypatch.setattr(app_gen.livereload, "generator", capture)
    app_gen.library(runner, app_config)

    target = app_gen.layout(app_config).target
    config = captured["config"]
    assert config.watch == [str(target / "**" / "*"), "!" + str(target / "**" / "*.map")]
    assert config.port == 35729


@pytest.mark.parametrize("register", [app_gen.library, app_gen.application])
def test_watch_runs_eslint_alongside_webpack(runner: Runner, app_config: BuildConfig, register) -> None:
    register(runner, app_config)
    started: list[str] = []
    lock = threading.Lock()

    def blocking(name):
        def fn():
            with lock:
                started.append(name)
            runner.stopped.wait(5)
        return fn

    runner.task("eslint:watch", blocking("eslint:watch"))
    runner.task("webpack:watch", blocking("webpack:watch"))
    thread = threading.Thread(target=runner.run, args=("watch",), daemon=True)
    thread.start()

    deadline = time.monotonic() + 5
    while len(started) < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    runner.stop()
    thread.join(5)

    assert sorted(started) == ["eslint:watch", "webpack:watch"]
