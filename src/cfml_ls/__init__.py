"""Heuristic CFML analysis and language server."""

__version__ = "0.1.0"
