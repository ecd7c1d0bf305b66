"""LSP-facing host for the analysis core."""

from . import server

__all__ = ["server"]
