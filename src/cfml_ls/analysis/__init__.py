"""Heuristic static analysis for CFML documents."""

from . import diagnostics, hover, keywords, literals, scope, signature_help, source_context, symbols, type_inference

__all__ = [
    "diagnostics",
    "hover",
    "keywords",
    "literals",
    "scope",
    "signature_help",
    "source_context",
    "symbols",
    "type_inference",
]
