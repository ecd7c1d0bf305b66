"""Heuristic value typing for assignments.

Every `name = value` statement in the document is classified by walking
``TYPE_RULES`` in order; the first rule whose predicate accepts the value decides
the type. Results are kept per variable in source order so callers can ask for
the most recent assignment before a given offset.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .symbols import ASSIGNMENT_RE, FunctionSignature

log = logging.getLogger(__name__)

FALLBACK_TYPE = "any"
# Placeholder tag resolved to the called function's declared return type.
RETURN_TYPE = "<return type>"

CALL_PREFIX_RE = re.compile(r"^([A-Za-z_]\w*)\s*\(")
TAG_CLOSE_RE = re.compile(r"\s*/?>\s*$")

Predicate = Callable[[str, Mapping[str, FunctionSignature]], bool]


@dataclass(frozen=True)
class TypeRule:
    tag: str
    predicate: Predicate


@dataclass(frozen=True)
class TypeBinding:
    type: str
    offset: int


def _matches(*patterns: str) -> Predicate:
    compiled = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    def predicate(value: str, _functions: Mapping[str, FunctionSignature]) -> bool:
        return any(regex.search(value) for regex in compiled)

    return predicate


def _calls_known_function(value: str, functions: Mapping[str, FunctionSignature]) -> bool:
    match = CALL_PREFIX_RE.match(value)
    return bool(match) and match.group(1) in functions


TYPE_RULES: Tuple[TypeRule, ...] = (
    TypeRule(RETURN_TYPE, _calls_known_function),
    TypeRule("string", _matches(r"^[\"']")),
    TypeRule("numeric", _matches(r"^\d+$")),
    TypeRule("numeric", _matches(r"^\d+\.\d+$")),
    TypeRule("boolean", _matches(r"^(true|false)$")),
    TypeRule("Java Object", _matches(r"^createObject\(\s*[\"']java[\"']")),
    TypeRule("struct", _matches(r"^structNew\(\)", r"^\{.*\}$")),
    TypeRule("array", _matches(r"^arrayNew\(\d*\)", r"^\[.*\]$")),
    TypeRule("CFC", _matches(r"^createObject\(\s*[\"']component[\"']", r"^new\s+[\w.]+\s*\(", r"\.cfc$")),
    TypeRule("query", _matches(r"^queryNew\(")),
    TypeRule("date/time", _matches(r"^dateAdd\(", r"^now\(\)", r"^createDate(Time)?\(")),
    TypeRule("UUID", _matches(r"^createUUID\(\)")),
)


def classify_value(value: str, functions: Mapping[str, FunctionSignature]) -> str:
    for rule in TYPE_RULES:
        if not rule.predicate(value, functions):
            continue
        if rule.tag == RETURN_TYPE:
            return functions[CALL_PREFIX_RE.match(value).group(1)].return_type
        return rule.tag
    return FALLBACK_TYPE


def infer_variable_types(
    text: str,
    functions: Mapping[str, FunctionSignature],
) -> Dict[str, List[TypeBinding]]:
    bindings: dict[str, list[TypeBinding]] = {}
    for match in ASSIGNMENT_RE.finditer(text):
        name = match.group(1)
        value = TAG_CLOSE_RE.sub("", match.group(2).strip())
        bindings.setdefault(name, []).append(TypeBinding(type=classify_value(value, functions), offset=match.start(1)))
    log.debug("Inferred bindings for %d variables", len(bindings))
    return bindings


def binding_before(bindings: Dict[str, List[TypeBinding]], name: str, offset: int) -> Optional[TypeBinding]:
    """Most recent binding of `name` recorded before `offset`."""
    for binding in reversed(bindings.get(name, [])):
        if binding.offset < offset:
            return binding
    return None
