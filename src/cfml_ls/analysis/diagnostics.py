from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence, Set, Tuple

from lsprotocol import types

from cfml_ls.config import DiagnosticSettings

from .keywords import is_reserved
from .literals import is_inside_string_literal, is_numeric_literal
from .scope import ScopeState
from .source_context import SourceContext
from .symbols import CALL_RE, FUNCTION_DEF_RE, SymbolTable, collect_symbols

log = logging.getLogger(__name__)

SOURCE = "cfml-ls"
SEVERITY = {
    "error": types.DiagnosticSeverity.Error,
    "warning": types.DiagnosticSeverity.Warning,
    "info": types.DiagnosticSeverity.Information,
}

COMMENT_LINE_RE = re.compile(r"^\s*(?://|/\*|\*|<!---)")
LINE_FUNCTION_DEF_RE = re.compile(r"\bfunction\s+(\w+)\s*\(", re.IGNORECASE)
RETURN_TYPE_RE = re.compile(r"\b([\w.]+)\s+function\s+\w+\s*\(", re.IGNORECASE)
CATCH_TYPE_RE = re.compile(r"\bcatch\s*\(\s*([\w.]+)\s+[A-Za-z_]\w*\s*\)", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]*>")
INTERPOLATION_RE = re.compile(r"#[^#]*#")
TOKEN_RE = re.compile(r"(?<![\w.])\w+(?:\.\w+)*")


class DiagnosticProvider:
    def __init__(self, settings: DiagnosticSettings | None = None):
        self._settings = settings or DiagnosticSettings()

    def analyze(self, source: str, treat_as_script: bool = False) -> List[types.Diagnostic]:
        """Return the full set of undefined-variable diagnostics for `source`.

        The result replaces whatever the host held before; nothing is carried over
        between calls.
        """
        if not self._settings.enabled:
            return []

        ctx = SourceContext(source)
        table = collect_symbols(source)
        state = ScopeState(in_script=treat_as_script)
        diagnostics: list[types.Diagnostic] = []

        for line_no, line in enumerate(ctx.lines):
            if COMMENT_LINE_RE.match(line):
                continue
            state = state.advance(line)
            if not state.active:
                continue
            diagnostics.extend(self._scan_line(line_no, line, state, table))

        log.debug("Scanned %d lines, %d undefined names", len(ctx.lines), len(diagnostics))
        return diagnostics

    def _scan_line(
        self,
        line_no: int,
        line: str,
        state: ScopeState,
        table: SymbolTable,
    ) -> List[types.Diagnostic]:
        line_names = functions_on_line(line) | declared_types_on_line(line)
        working = strip_tags(line)
        spans = interpolation_spans(working) if state.in_output else []
        diagnostics: list[types.Diagnostic] = []

        for match in TOKEN_RE.finditer(working):
            token = match.group(0)
            start, end = match.span()
            if self._is_suppressed(token, start, end, working, state, spans, line_names, table):
                continue
            diagnostics.append(
                _make_diagnostic(
                    line_no,
                    start,
                    end,
                    f'The variable "{token}" is not defined.',
                    self._settings.severity,
                )
            )
        return diagnostics

    def _is_suppressed(
        self,
        token: str,
        start: int,
        end: int,
        line: str,
        state: ScopeState,
        spans: Sequence[Tuple[int, int]],
        line_names: Set[str],
        table: SymbolTable,
    ) -> bool:
        root = token.split(".", 1)[0]
        if table.knows(root):
            return True
        if not state.active:
            return True
        if state.in_output and not _within_any(start, end, spans):
            return True
        if is_inside_string_literal(line, start):
            return True
        if is_numeric_literal(token) or token[0].isdigit():
            return True
        if is_reserved(token):
            return True
        if token in line_names:
            return True
        return root in self._settings.extra_known_names


def functions_on_line(line: str) -> Set[str]:
    names = {match.group(1) for match in LINE_FUNCTION_DEF_RE.finditer(line)}
    names.update(match.group(1) for match in CALL_RE.finditer(line))
    return names


def declared_types_on_line(line: str) -> Set[str]:
    """Type words in declaration position: return types, parameter types and catch types."""
    names = {match.group(1) for match in RETURN_TYPE_RE.finditer(line)}
    names.update(match.group(1) for match in CATCH_TYPE_RE.finditer(line))
    for match in FUNCTION_DEF_RE.finditer(line):
        for declaration in match.group(2).split(","):
            # everything before the parameter name is a modifier or a type
            names.update(declaration.split("=", 1)[0].split()[:-1])
    return names


def strip_tags(line: str) -> str:
    """Blank out `<...>` markup, keeping column positions intact."""
    return TAG_RE.sub(lambda match: " " * len(match.group(0)), line)


def interpolation_spans(line: str) -> List[Tuple[int, int]]:
    return [match.span() for match in INTERPOLATION_RE.finditer(line)]


def _within_any(start: int, end: int, spans: Iterable[Tuple[int, int]]) -> bool:
    return any(span_start < start and end < span_end for span_start, span_end in spans)


def _make_diagnostic(line: int, start: int, end: int, message: str, level: str) -> types.Diagnostic:
    return types.Diagnostic(
        message=message,
        range=types.Range(
            start=types.Position(line=line, character=start),
            end=types.Position(line=line, character=end),
        ),
        severity=SEVERITY.get(level, types.DiagnosticSeverity.Error),
        source=SOURCE,
    )
