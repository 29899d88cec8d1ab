# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from frontbuild.runner import Runner
from frontbuild.runner.config import BuildConfig

from .helpers import write_package


@pytest.fixture()
def runner() -> Runner:
    r = Runner(name="test")
    yield r
    r.stop()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """
    Throw-away package tree with the files the generators read at
    registration time.
    """
    write_package(
        tmp_path,
        name="demo-app",
        version="1.2.3",
        config={"name": "Demo", "description": "Demo application"},
        dependencies={"mag-component-button": "^1.0.0", "lodash": "^4.0.0"},
        devDependencies={"mag-component-list": "^1.0.0"},
    )
    (tmp_path / "build.yaml").write_text(
        "type: app\nvars:\n  PLATFORM: MAG\n  DEVELOP: 'false'\npackage:\n  name: demo-app-release\n",
        encoding="utf-8",
    )
    (tmp_path / ".npmignore").write_text("*.map\n", encoding="utf-8")
    (tmp_path / "src" / "js").mkdir(parents=True)
    (tmp_path / "src" / "img").mkdir(parents=True)
    return tmp_path


@pytest.fixture()
def app_config(project: Path) -> BuildConfig:
    return BuildConfig(
        type="app",
        vars={"PLATFORM": "MAG", "DEVELOP": "false", "VERSION": "1.2.3"},
        package={"name": "demo-app-release"},
        cwd=project,
    )
