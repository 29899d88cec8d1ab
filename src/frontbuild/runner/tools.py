"""File-system helpers shared by the generators."""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, TypeVar, Union

T = TypeVar("T")

PathLike = Union[str, Path]


def mkdir(paths: Iterable[PathLike], log: logging.Logger) -> None:
    for p in paths:
        Path(p).mkdir(parents=True, exist_ok=True)
        log.info("mkdir %s", p)


def write(files: Iterable[tuple[PathLike, Union[str, bytes]]], log: logging.Logger) -> None:
    """Write each (path, data) pair, creating parent directories."""
    for name, data in files:
        p = Path(name)
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            p.write_bytes(data)
        else:
            p.write_text(data, encoding="utf-8")
        log.info("write %s (%d bytes)", p, len(data))


def copy(source: PathLike, target: PathLike, log: logging.Logger) -> None:
    shutil.copytree(source, target, dirs_exist_ok=True)
    log.info("copy %s -> %s", source, target)


def unlink(paths: Iterable[PathLike], log: logging.Logger) -> None:
    for p in paths:
        p = Path(p)
        if p.is_dir():
            shutil.rmtree(p)
        else:
            p.unlink(missing_ok=True)
        log.info("remove %s", p)


def parallel(calls: list[Callable[[], T]]) -> list[T]:
    """Run `calls` concurrently; results come back in call order.

    The first failure to complete is raised.
    """
    if not calls:
        return []
    results: list = [None] * len(calls)
    with ThreadPoolExecutor(max_workers=len(calls)) as executor:
        futures = {executor.submit(fn): i for i, fn in enumerate(calls)}
        for f in as_completed(futures):
            results[futures[f]] = f.result()  # will raise if the call failed
    return results
