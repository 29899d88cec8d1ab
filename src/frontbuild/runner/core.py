from __future__ import annotations

import inspect
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Iterable, Union

from .logging import get_logger
from .watch import Watcher


# A step is either a registered task name or something callable
Step = Union[str, Callable[[], None]]


@dataclass
class TaskSpec:
    name: str
    fn: Callable[[], None]
    description: str = ""


class Composite:
    """A step made of other steps, run one after another or all at once."""

    def __init__(self, runner: "Runner", mode: str, steps: Iterable[Step]):
        if mode not in ("serial", "parallel"):
            raise ValueError(f"Unknown composite mode: {mode}")
        self.runner = runner
        self.mode = mode
        self.steps = tuple(steps)

    def __call__(self) -> None:
        if self.mode == "serial":
            self.runner._run_serial(self.steps)
        else:
            self.runner._run_parallel(self.steps)

    def __repr__(self) -> str:
        return f"{self.mode}({', '.join(_label(s) for s in self.steps)})"


def _label(step: Step) -> str:
    if isinstance(step, str):
        return step
    if isinstance(step, Composite):
        return repr(step)
    return getattr(step, "__name__", repr(step))


def topo_sort(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    nodes = list(nodes)
    incoming = {n: set() for n in nodes}
    outgoing = {n: set() for n in nodes}
    for u, v in edges:
        if u not in incoming or v not in incoming:
            raise KeyError(f"Edge references unknown task: {(u, v)}")
        outgoing[u].add(v)
        incoming[v].add(u)
    ordered: list[str] = []
    roots = [n for n in nodes if not incoming[n]]
    while roots:
        n = roots.pop()
        ordered.append(n)
        for m in list(outgoing[n]):
            incoming[m].discard(n)
            outgoing[n].discard(m)
            if not incoming[m]:
                roots.append(m)
    if any(incoming[n] for n in nodes):
        raise ValueError("Cycle detected in task graph")
    return ordered


class Runner:
    """Registry of named tasks and the executor for serial/parallel composites."""

    def __init__(self, name: str = "frontbuild"):
        self.name = name
        self.tasks: dict[str, TaskSpec] = {}
        self.stopped = threading.Event()
        self.logger = get_logger(self.name)
        self._watchers: list[Watcher] = []

    def task(self, name: str, fn: Callable[[], None] | None = None, description: str = ""):
        """Register `fn` under `name`. Without `fn`, return a decorator."""

        def deco(fn: Callable[[], None]):
            doc = description
            if not doc and not isinstance(fn, Composite):
                doc = (inspect.getdoc(fn) or "").strip().split("\n")[0]
            self.tasks[name] = TaskSpec(name=name, fn=fn, description=doc)
            return fn

        if fn is not None:
            return deco(fn)
        return deco

    def serial(self, *steps: Step) -> Composite:
        return Composite(self, "serial", steps)

    def parallel(self, *steps: Step) -> Composite:
        return Composite(self, "parallel", steps)

    def run(self, step: Step) -> None:
        if not isinstance(step, str):
            step()
            return
        spec = self.tasks.get(step)
        if spec is None:
            raise KeyError(f"Unknown task: {step}")
        log = get_logger(f"{self.name}.{step}")
        log.info("Run: %s", step)
        started = time.monotonic()
        try:
            spec.fn()
        except Exception:
            log.exception("Task failed: %s", step)
            raise
        log.info("Done: %s (%.2fs)", step, time.monotonic() - started)

    def _run_serial(self, steps: tuple[Step, ...]) -> None:
        for step in steps:
            self.run(step)

    def _run_parallel(self, steps: tuple[Step, ...]) -> None:
        if not steps:
            return
        executor = ThreadPoolExecutor(
            max_workers=len(steps), thread_name_prefix=f"{self.name}-parallel"
        )
        futures = [executor.submit(self.run, step) for step in steps]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        # Running siblings keep going after a failure
        executor.shutdown(wait=False)
        for f in futures:
            if f in done and f.exception() is not None:
                f.result()

    def dependencies(self, name: str) -> list[str]:
        """Task names a composite task refers to, nested composites flattened."""
        spec = self.tasks.get(name)
        if spec is None:
            raise KeyError(f"Unknown task: {name}")
        out: list[str] = []
        pending: list[Step] = [spec.fn]
        while pending:
            step = pending.pop(0)
            if isinstance(step, str):
                if step not in out:
                    out.append(step)
            elif isinstance(step, Composite):
                pending[:0] = list(step.steps)
        return out

    def validate(self) -> list[str]:
        """Check composite references and return task names in dependency order."""
        edges = []
        for name in self.tasks:
            for dep in self.dependencies(name):
                if dep not in self.tasks:
                    raise KeyError(f"Task {name} refers to unknown task: {dep}")
                edges.append((dep, name))
        return topo_sort(self.tasks.keys(), edges)

    def watch(self, pattern: str, step: Step, delay: float = 0.05) -> Watcher:
        watcher = Watcher(pattern, lambda changed: self._run_watched(step), delay=delay)
        watcher.start()
        self._watchers.append(watcher)
        self.logger.info("Watch: %s -> %s", pattern, _label(step))
        return watcher

    def _run_watched(self, step: Step) -> None:
        try:
            self.run(step)
        except Exception:  # noqa: BLE001
            # keep watching after a failed rebuild
            self.logger.warning("Rebuild failed: %s", _label(step))

    def stop(self) -> None:
        self.stopped.set()
        for watcher in self._watchers:
            watcher.stop()
        self._watchers.clear()
