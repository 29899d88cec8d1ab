"""Development HTTP server for the build directory."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from flask import Flask, send_from_directory
from werkzeug.serving import make_server

from ..runner import Runner
from ..runner.logging import get_logger


NAME = "static"

log = get_logger(NAME)


@dataclass
class StaticConfig:
    open: Path
    host: str = "0.0.0.0"
    port: int = 8080


def create_app(root: Path) -> Flask:
    root = Path(root).resolve()
    app = Flask(__name__, static_folder=None)

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def serve(path):
        if (root / path).is_dir():
            path = f"{path.rstrip('/')}/index.html".lstrip("/")
        return send_from_directory(root, path)

    return app


def generator(runner: Runner, config: StaticConfig, prefix: str = f"{NAME}:", suffix: str = "") -> None:
    @runner.task(f"{prefix}start{suffix}")
    def start():
        """Serve the build directory until stopped."""
        server = make_server(config.host, config.port, create_app(config.open), threaded=True)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        log.info("Serving %s at http://%s:%d/", config.open, config.host, server.server_port)
        try:
            runner.stopped.wait()
        finally:
            server.shutdown()
            thread.join()
