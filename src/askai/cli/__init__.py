"""Command line interface for askai."""

from .app import app, main

__all__ = ["app", "main"]
