"""HTTP API exposing the load test engine."""

from .app import create_app

__all__ = ["create_app"]
