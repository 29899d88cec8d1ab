from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv

from ..generators import generate
from .config import load_config, parse_overrides
from .core import Runner
from .logging import configure, get_logger


app = typer.Typer(add_completion=False, help="Front-end build task runner")
log = get_logger("cli")


def build_runner(config: str, var: List[str], cwd: str = ".") -> Runner:
    """Load the build config and register every task for it."""
    load_dotenv(Path(cwd) / ".env")
    config_path = Path(config)
    if not config_path.is_absolute():
        config_path = Path(cwd) / config_path
    cfg = load_config(config_path, overrides=parse_overrides(var), cwd=cwd)
    runner = Runner()
    generate(runner, cfg)
    runner.validate()
    return runner


@app.command("list")
def list_tasks(
    config: str = typer.Option("build.yaml", help="Path to YAML build config"),
    var: List[str] = typer.Option([], "--var", help="Override a build variable, NAME=VALUE"),
    cwd: str = typer.Option(".", help="Project directory"),
):
    """List registered tasks."""
    runner = build_runner(config, var, cwd)
    typer.echo("Registered tasks:")
    for name in sorted(runner.tasks):
        spec = runner.tasks[name]
        deps = runner.dependencies(name)
        line = f"- {name}"
        if spec.description:
            line += f": {spec.description}"
        if deps:
            line += f" [{', '.join(deps)}]"
        typer.echo(line)


@app.command()
def run(
    tasks: Optional[List[str]] = typer.Argument(None, help="Task names to run (default: default)"),
    config: str = typer.Option("build.yaml", help="Path to YAML build config"),
    var: List[str] = typer.Option([], "--var", help="Override a build variable, NAME=VALUE"),
    cwd: str = typer.Option(".", help="Project directory"),
    log_file: Optional[Path] = typer.Option(None, help="Also log to this file"),
    log_level: Optional[str] = typer.Option(None, help="DEBUG, INFO, WARNING or ERROR"),
):
    """Run tasks by name, one after another."""
    try:
        configure(level=log_level, log_file=log_file)
    except ValueError as e:
        typer.echo(str(e))
        raise typer.Exit(code=2)
    runner = build_runner(config, var, cwd)
    names = tasks or ["default"]
    missing = [n for n in names if n not in runner.tasks]
    if missing:
        typer.echo(f"Task not found: {', '.join(missing)}")
        raise typer.Exit(code=1)
    try:
        runner.run(runner.serial(*names))
    except KeyboardInterrupt:
        log.info("Interrupted, stopping")
    except Exception:  # noqa: BLE001
        # already logged by the runner
        raise typer.Exit(code=1)
    finally:
        runner.stop()


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
