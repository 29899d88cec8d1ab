# tests/test_tools.py

from __future__ import annotations

import logging
import time
from pathlib import Path

import pytest

from frontbuild.runner import tools

log = logging.getLogger("test.tools")


def test_write_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "out.txt"

    tools.write([(target, "hello"), (tmp_path / "raw.bin", b"\x00\x01")], log)

    assert target.read_text(encoding="utf-8") == "hello"
    assert (tmp_path / "raw.bin").read_bytes() == b"\x00\x01"


def test_mkdir_and_unlink(tmp_path: Path) -> None:
    tools.mkdir([tmp_path / "x" / "y", tmp_path / "z"], log)
    assert (tmp_path / "x" / "y").is_dir()

    (tmp_path / "file.txt").write_text("data", encoding="utf-8")
    tools.unlink([tmp_path / "x", tmp_path / "file.txt", tmp_path / "missing.txt"], log)

    assert not (tmp_path / "x").exists()
    assert not (tmp_path / "file.txt").exists()
    assert (tmp_path / "z").is_dir()


def test_copy_merges_into_existing_target(tmp_path: Path) -> None:
    (tmp_path / "src" / "icons").mkdir(parents=True)
    (tmp_path / "src" / "icons" / "a.png").write_bytes(b"png")
    (tmp_path / "dst").mkdir()
    (tmp_path / "dst" / "keep.txt").write_text("keep", encoding="utf-8")

    tools.copy(tmp_path / "src", tmp_path / "dst", log)

    assert (tmp_path / "dst" / "icons" / "a.png").read_bytes() == b"png"
    assert (tmp_path / "dst" / "keep.txt").exists()


def test_parallel_keeps_call_order() -> None:
    def make(value, delay):
        def fn():
            time.sleep(delay)
            return value

        return fn

    assert tools.parallel([make(1, 0.05), make(2, 0.0), make(3, 0.02)]) == [1, 2, 3]


def test_parallel_raises_first_error() -> None:
    def bad():
        raise ValueError("broken")

    with pytest.raises(ValueError, match="broken"):
        tools.parallel([lambda: 1, bad])


def test_parallel_empty() -> None:
    assert tools.parallel([]) == []
