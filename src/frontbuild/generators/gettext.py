"""Translation catalogs with Babel.

`po` extracts messages from the JavaScript sources into a template and merges
it into one `.po` file per language. `json` compiles those into the JSON
dictionaries loaded by the application at run time:

    {"meta": {...}, "data": {"<context>": {"<msgid>": "<msgstr>"}}}
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from babel.messages.catalog import Catalog
from babel.messages.extract import DEFAULT_KEYWORDS, extract_from_dir
from babel.messages.pofile import read_po, write_po

from ..runner import Runner, tools
from ..runner.logging import get_logger, inspect


NAME = "gettext"
TEMPLATE = "messages.pot"
METHOD_MAP = [("**.js", "javascript")]

log = get_logger(NAME)


@dataclass
class GettextConfig:
    languages: list[str]
    source: Path
    target: Path
    js_data: list[Path] = field(default_factory=list)
    project: str = ""
    version: str = ""
    root: Path | None = None


def _location(path: Path, root: Path | None) -> str:
    if root is None:
        return path.as_posix()
    return Path(os.path.relpath(path, root)).as_posix()


def extract(config: GettextConfig) -> Catalog:
    template = Catalog(project=config.project or None, version=config.version or None)
    for directory in config.js_data:
        if not Path(directory).is_dir():
            log.warning("No sources to extract in %s", directory)
            continue
        for filename, lineno, message, comments, context in extract_from_dir(
            str(directory), method_map=METHOD_MAP, keywords=DEFAULT_KEYWORDS
        ):
            template.add(
                message,
                locations=[(_location(Path(directory) / filename, config.root), lineno)],
                auto_comments=comments,
                context=context,
            )
    return template


def _read(path: Path, locale: str) -> Catalog:
    with open(path, "rb") as f:
        return read_po(f, locale=locale)


def _write(path: Path, catalog: Catalog) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        write_po(f, catalog, width=120)
    log.info("write %s (%d messages)", path, len(catalog))


def po(config: GettextConfig) -> None:
    template = extract(config)
    source = Path(config.source)
    _write(source / TEMPLATE, template)
    for lang in config.languages:
        path = source / f"{lang}.po"
        if path.exists():
            catalog = _read(path, lang)
        else:
            catalog = Catalog(locale=lang, project=config.project or None, version=config.version or None)
        catalog.update(template)
        _write(path, catalog)


def to_json(catalog: Catalog) -> dict:
    data: dict[str, dict] = {}
    for message in catalog:
        # fuzzy entries are unreviewed guesses from the last merge
        if not message.id or not message.string or message.fuzzy:
            continue
        if message.pluralizable:
            if not any(message.string):
                continue
            key, value = message.id[0], list(message.string)
        else:
            key, value = message.id, message.string
        data.setdefault(message.context or "", {})[key] = value
    meta = {
        "language": str(catalog.locale) if catalog.locale else "",
        "plural": catalog.plural_forms,
        "project": catalog.project,
        "version": catalog.version,
    }
    return {"meta": meta, "data": data}


def compile_json(config: GettextConfig) -> None:
    files = []
    for lang in config.languages:
        catalog = _read(Path(config.source) / f"{lang}.po", lang)
        files.append((Path(config.target) / f"{lang}.json", json.dumps(to_json(catalog), ensure_ascii=False, indent=1)))
    tools.write(files, log)


def clear(config: GettextConfig) -> None:
    tools.unlink([Path(config.target) / f"{lang}.json" for lang in config.languages], log)


def generator(runner: Runner, config: GettextConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        inspect(log, asdict(config))

    @runner.task(f"{prefix}po{suffix}")
    def run_po():
        """Extract messages and update per-language .po files."""
        po(config)

    @runner.task(f"{prefix}json{suffix}")
    def run_json():
        """Compile .po files into JSON dictionaries."""
        compile_json(config)

    runner.task(
        f"{prefix}build{suffix}",
        runner.serial(f"{prefix}po{suffix}", f"{prefix}json{suffix}"),
        description="Extract and compile translations",
    )

    @runner.task(f"{prefix}clear{suffix}")
    def run_clear():
        clear(config)
