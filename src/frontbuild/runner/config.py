from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml


ENV_PREFIX = "FRONTBUILD_"
PACKAGE_TYPES = ("app", "lib")
LIVERELOAD_PORT = 35729


@dataclass
class BuildConfig:
    type: str = "app"
    vars: dict = field(default_factory=dict)
    package: dict = field(default_factory=dict)
    cwd: Path = Path(".")


def load_config(
    path: str | Path,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    cwd: str | Path = ".",
) -> BuildConfig:
    """Read the YAML build config and layer env and command line vars on top."""
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    kind = raw.get("type", "app")
    if kind not in PACKAGE_TYPES:
        raise ValueError(f"Unknown package type: {kind!r} (expected one of {PACKAGE_TYPES})")
    variables = dict(raw.get("vars") or {})
    env = os.environ if env is None else env
    for key, value in env.items():
        if key.startswith(ENV_PREFIX) and len(key) > len(ENV_PREFIX):
            variables[key[len(ENV_PREFIX):]] = value
    variables.update(overrides or {})
    return BuildConfig(
        type=kind,
        vars=variables,
        package=dict(raw.get("package") or {}),
        cwd=Path(cwd),
    )


def parse_overrides(items: Iterable[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected NAME=VALUE, got: {item!r}")
        out[key.strip()] = value
    return out


def prepare_vars(variables: Mapping[str, Any]) -> dict[str, Any]:
    prepared = dict(variables)
    develop = prepared.get("DEVELOP")
    prepared["DEVELOP"] = develop is True or develop == "true"
    prepared["LIVERELOAD"] = {"port": LIVERELOAD_PORT}
    return prepared


def define_constants(variables: Mapping[str, Any]) -> dict[str, str]:
    """Serialise variables to JavaScript source for compile-time substitution."""
    return {name: json.dumps(value, default=str) for name, value in variables.items()}
