"""Command-line entry point and terminal surface."""

from .app import app
from .render import Renderer

__all__ = [
    "Renderer",
    "app",
]
