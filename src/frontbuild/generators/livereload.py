"""LiveReload server for development builds.

Pages built with DEVELOP load the livereload client, which connects to
``ws://<host>:LIVERELOAD_PORT``. When a watched file in the build directory
changes, every connected client is sent a reload command. Stylesheets are
swapped in place and anything else reloads the page.

Patterns starting with ``!`` exclude matching files, e.g. source maps:

    ["build/mag/**/*", "!build/mag/**/*.map"]
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import asdict, dataclass
from pathlib import Path

from websockets.exceptions import ConnectionClosed
from websockets.sync.server import ServerConnection, serve as websocket_serve

from ..runner import Runner
from ..runner.config import LIVERELOAD_PORT
from ..runner.logging import get_logger, inspect
from ..runner.watch import Watcher, matches


NAME = "livereload"
PROTOCOL = "http://livereload.com/protocols/official-7"

log = get_logger(NAME)


@dataclass
class LivereloadConfig:
    watch: list[str]
    root: Path
    host: str = "0.0.0.0"
    port: int = LIVERELOAD_PORT
    delay: float = 0.1
    server_name: str = "frontbuild"


def split_patterns(patterns: list[str]) -> tuple[list[str], list[str]]:
    include, exclude = [], []
    for pattern in patterns:
        if pattern.startswith("!"):
            exclude.append(os.path.abspath(pattern[1:]))
        else:
            include.append(pattern)
    return include, exclude


def reload_paths(changed: list[str], root: Path, exclude: list[str]) -> list[str]:
    """URL paths of the changed files that are not excluded."""
    out = []
    for path in changed:
        path = os.path.abspath(path)
        if any(matches(path, pattern) for pattern in exclude):
            continue
        out.append("/" + Path(os.path.relpath(path, root)).as_posix())
    return out


class ReloadHub:
    """Connected clients and the reload broadcast."""

    def __init__(self, server_name: str = "frontbuild"):
        self.server_name = server_name
        self.clients: set[ServerConnection] = set()
        self.ready = threading.Event()
        self.port: int | None = None
        self._lock = threading.Lock()

    def hello(self) -> dict:
        return {"command": "hello", "protocols": [PROTOCOL], "serverName": self.server_name}

    def handler(self, connection: ServerConnection) -> None:
        try:
            for message in connection:
                try:
                    data = json.loads(message)
                except ValueError:
                    log.debug("Ignoring malformed message: %r", message)
                    continue
                if not isinstance(data, dict) or data.get("command") != "hello":
                    continue
                with self._lock:
                    self.clients.add(connection)
                connection.send(json.dumps(self.hello()))
                log.info("Client connected: %s", connection.remote_address)
        except ConnectionClosed:
            log.debug("Client closed: %s", connection.remote_address)
        finally:
            with self._lock:
                self.clients.discard(connection)

    def reload(self, path: str) -> int:
        """Send a reload for `path` to every client, return how many got it."""
        message = json.dumps({"command": "reload", "path": path, "liveCSS": True})
        with self._lock:
            clients = list(self.clients)
        sent = 0
        for connection in clients:
            try:
                connection.send(message)
                sent += 1
            except ConnectionClosed:
                with self._lock:
                    self.clients.discard(connection)
        return sent


def serve(config: LivereloadConfig, stopped: threading.Event, hub: ReloadHub | None = None) -> None:
    """Accept clients and push reloads until `stopped` is set."""
    hub = hub or ReloadHub(config.server_name)
    include, exclude = split_patterns(config.watch)
    root = Path(os.path.abspath(config.root))

    def on_change(changed: list[str]) -> None:
        for path in reload_paths(changed, root, exclude):
            log.info("Reload %s (%d clients)", path, hub.reload(path))

    server = websocket_serve(hub.handler, config.host, config.port)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    watchers = [Watcher(pattern, on_change, delay=config.delay) for pattern in include]
    try:
        for watcher in watchers:
            watcher.start()
        hub.port = server.socket.getsockname()[1]
        log.info("Listening on ws://%s:%d", config.host, hub.port)
        hub.ready.set()
        stopped.wait()
    finally:
        for watcher in watchers:
            watcher.stop()
        server.shutdown()
        thread.join()


def generator(runner: Runner, config: LivereloadConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}config{suffix}")
    def show_config():
        inspect(log, asdict(config))

    @runner.task(f"{prefix}start{suffix}")
    def start():
        """Reload connected pages when the build changes."""
        serve(config, runner.stopped)
