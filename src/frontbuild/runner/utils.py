from __future__ import annotations

"""Small helpers for building artifact paths from build variables."""

import json
from pathlib import Path
from typing import Dict


def target_name(v: Dict) -> str:
    return v.get("TARGET") or (v.get("PLATFORM") or "TARGET").lower()


def target_dir(v: Dict, root: str | Path = ".") -> Path:
    return Path(root) / "build" / target_name(v)


def platform_name(v: Dict) -> str | None:
    platform = v.get("PLATFORM")
    return platform.lower() if platform else v.get("TARGET")


def build_mode(develop: bool) -> str:
    return "develop" if develop else "release"


def read_package(cwd: str | Path = ".") -> dict:
    """Parse package.json; read fresh on every call."""
    with open(Path(cwd) / "package.json", "r", encoding="utf-8") as f:
        return json.load(f)
