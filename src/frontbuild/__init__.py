"""Build-pipeline wiring for set-top-box front-end applications."""

__version__ = "0.1.0"
