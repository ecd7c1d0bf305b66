from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from lsprotocol import types

from .source_context import SourceContext

log = logging.getLogger(__name__)

ASSIGNMENT_RE = re.compile(r"\b([A-Za-z_]\w*)\s*=(?!=)\s*([^;\n]+)")
FUNCTION_DEF_RE = re.compile(r"\bfunction\s+([A-Za-z_]\w*)\s*\(([^)]*)\)", re.IGNORECASE)
CALL_RE = re.compile(r"\b([A-Za-z_]\w*)\(")
SIGNATURE_RE = re.compile(
    r"\b(?:public|private|package|remote)\s+([\w.\[\]]+)\s+function\s+([A-Za-z_]\w*)\s*\(([^)]*)\)",
    re.IGNORECASE,
)
LOOP_TAG_RE = re.compile(r"<cfloop\b[^>]*>", re.IGNORECASE)
LOOP_ATTR_RE = re.compile(r"\b(?:index|item)\s*=\s*[\"']([A-Za-z_]\w*)[\"']", re.IGNORECASE)
NAMED_TAG_RE = re.compile(
    r"<cf(?:argument|param|query|function)\b[^>]*?\bname\s*=\s*[\"']([A-Za-z_]\w*)[\"']",
    re.IGNORECASE,
)
FOR_IN_RE = re.compile(r"\bfor\s*\(\s*(?:var\s+)?([A-Za-z_]\w*)\s+in\b", re.IGNORECASE)
CATCH_RE = re.compile(r"\bcatch\s*\(\s*(?:[\w.]+\s+)?([A-Za-z_]\w*)\s*\)", re.IGNORECASE)

DEFAULT_PARAM_TYPE = "any"


@dataclass
class FunctionSignature:
    name: str
    return_type: str
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def label(self) -> str:
        params = ", ".join(f"{ptype} {pname}" for pname, ptype in self.parameters.items())
        return f"{self.name}({params}): {self.return_type}"


@dataclass
class FunctionBody:
    name: str
    parameters: Dict[str, str]
    start: int
    end: int
    text: str


class SymbolTable:
    def __init__(self, identifiers: Set[str], functions: Dict[str, FunctionSignature]):
        self._identifiers = identifiers
        self._functions = functions

    @property
    def identifiers(self) -> Set[str]:
        return self._identifiers

    @property
    def functions(self) -> Dict[str, FunctionSignature]:
        return self._functions

    def knows(self, name: str) -> bool:
        return name in self._identifiers


def collect_symbols(text: str) -> SymbolTable:
    identifiers: set[str] = set()
    identifiers.update(_assignment_targets(text))
    identifiers.update(_function_definitions(text))
    identifiers.update(_call_targets(text))
    identifiers.update(_loop_indices(text))
    identifiers.update(match.group(1) for match in NAMED_TAG_RE.finditer(text))
    identifiers.update(match.group(1) for match in CATCH_RE.finditer(text))
    functions = extract_function_signatures(text)
    log.debug("Collected %d identifiers and %d signatures", len(identifiers), len(functions))
    return SymbolTable(identifiers, functions)


def extract_function_signatures(text: str) -> Dict[str, FunctionSignature]:
    signatures: dict[str, FunctionSignature] = {}
    for match in SIGNATURE_RE.finditer(text):
        return_type, name, args = match.groups()
        # Later definitions replace earlier ones with the same name.
        signatures[name] = FunctionSignature(name=name, return_type=return_type, parameters=parse_parameters(args))
    return signatures


def parse_parameters(args: str) -> Dict[str, str]:
    """Map parameter names to declared types for a `[required] [type] name [= default]` list."""
    params: dict[str, str] = {}
    for declaration in args.split(","):
        tokens = declaration.split("=", 1)[0].split()
        if not tokens:
            continue
        name = tokens[-1]
        ptype = tokens[-2] if len(tokens) > 1 else DEFAULT_PARAM_TYPE
        if ptype.lower() == "required":
            ptype = DEFAULT_PARAM_TYPE
        params[name] = ptype
    return params


def iter_function_bodies(text: str) -> Iterator[FunctionBody]:
    """Yield script functions with the text between the parameter list and its closing brace.

    Functions without a brace body (interfaces, abstract declarations) are skipped.
    An unterminated body runs to the end of the text.
    """
    for match in FUNCTION_DEF_RE.finditer(text):
        brace = text.find("{", match.end())
        if brace == -1 or ";" in text[match.end():brace]:
            continue
        end = _matching_brace(text, brace)
        yield FunctionBody(
            name=match.group(1),
            parameters=parse_parameters(match.group(2)),
            start=match.start(),
            end=end,
            text=text[brace + 1:end],
        )


def document_symbols(source: str) -> List[types.DocumentSymbol]:
    ctx = SourceContext(source)
    symbols: list[types.DocumentSymbol] = []
    for match in FUNCTION_DEF_RE.finditer(source):
        symbols.append(_document_symbol(ctx, match.group(1), types.SymbolKind.Function, match.span(1)))

    seen: set[str] = set()
    for match in ASSIGNMENT_RE.finditer(source):
        name = match.group(1)
        if name in seen:
            continue
        seen.add(name)
        symbols.append(_document_symbol(ctx, name, types.SymbolKind.Variable, match.span(1)))
    symbols.sort(key=lambda sym: (sym.range.start.line, sym.range.start.character))
    return symbols


def find_definition_offset(source: str, name: str) -> Optional[int]:
    for match in FUNCTION_DEF_RE.finditer(source):
        if match.group(1) == name:
            return match.start(1)
    for match in ASSIGNMENT_RE.finditer(source):
        if match.group(1) == name:
            return match.start(1)
    return None


def _document_symbol(
    ctx: SourceContext,
    name: str,
    kind: types.SymbolKind,
    span: Tuple[int, int],
) -> types.DocumentSymbol:
    rng = types.Range(start=ctx.position_at(span[0]), end=ctx.position_at(span[1]))
    return types.DocumentSymbol(name=name, kind=kind, range=rng, selection_range=rng)


def _assignment_targets(text: str) -> Iterator[str]:
    for match in ASSIGNMENT_RE.finditer(text):
        yield match.group(1)


def _function_definitions(text: str) -> Iterator[str]:
    for match in FUNCTION_DEF_RE.finditer(text):
        yield match.group(1)
        yield from parse_parameters(match.group(2))


def _call_targets(text: str) -> Iterator[str]:
    for match in CALL_RE.finditer(text):
        yield match.group(1)
        close = text.find(")", match.end())
        args = text[match.end():close] if close != -1 else ""
        for arg in args.split(","):
            arg = arg.strip()
            # Best effort: whole expressions are admitted as-is.
            if arg and arg[0] not in "\"'":
                yield arg


def _loop_indices(text: str) -> Iterator[str]:
    for tag in LOOP_TAG_RE.finditer(text):
        for attr in LOOP_ATTR_RE.finditer(tag.group(0)):
            yield attr.group(1)
    for match in FOR_IN_RE.finditer(text):
        yield match.group(1)


def _matching_brace(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(text)
