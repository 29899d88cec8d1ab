"""Logging for the runner and the generators.

All loggers live under the ``frontbuild`` namespace, so one `configure` call
sets the level and the handlers for a whole build. Until the CLI calls it, the
first `get_logger` configures console output with the level taken from
``FRONTBUILD_LOG_LEVEL``.
"""

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


NAMESPACE = "frontbuild"
LEVEL_ENV = "FRONTBUILD_LOG_LEVEL"
FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"

_configured = False


def parse_level(value: str | int | None) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName((value or "INFO").strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def configure(level: str | int | None = None, log_file: Path | None = None) -> logging.Logger:
    """Replace the namespace handlers with a console handler and, if given, a
    rotating file handler. Calling it again swaps the handlers, it never stacks
    them.
    """
    global _configured
    root = logging.getLogger(NAMESPACE)
    root.setLevel(parse_level(level if level is not None else os.getenv(LEVEL_ENV)))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(FORMAT, DATE_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(formatter)
        root.addHandler(handler)
    _configured = True
    return root


def get_logger(name: str = NAMESPACE) -> logging.Logger:
    """Logger for `name`, placed under the namespace unless it already is."""
    if not _configured:
        configure()
    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


def inspect(logger: logging.Logger, data: dict) -> None:
    """Log a configuration mapping as indented JSON."""
    logger.info("%s", json.dumps(data, indent=2, sort_keys=True, default=str))
