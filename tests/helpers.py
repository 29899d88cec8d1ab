# tests/helpers.py

from __future__ import annotations

import json
from pathlib import Path


def write_package(root: Path, **data) -> None:
    (root / "package.json").write_text(json.dumps(data), encoding="utf-8")


def write_module_css(root: Path, module: str, name: str, text: str) -> None:
    css_dir = root / "node_modules" / module / "css"
    css_dir.mkdir(parents=True, exist_ok=True)
    (css_dir / name).write_text(text, encoding="utf-8")
