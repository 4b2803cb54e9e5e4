"""HTTP surface for starting and polling playlist jobs."""

from .app import create_app

__all__ = ["create_app"]
