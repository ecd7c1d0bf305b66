from __future__ import annotations

import re
from typing import List, Optional, Tuple

from lsprotocol import types

from .source_context import SourceContext
from .symbols import extract_function_signatures

SCAN_RE = re.compile(r"[A-Za-z_]\w*|[\"'()\[\]{},;]|\S")
IDENT_RE = re.compile(r"^[A-Za-z_]\w*$")


def signature_help_for_position(source: str, line: int, character: int) -> Optional[types.SignatureHelp]:
    ctx = SourceContext(source)
    call = _open_call(source[: ctx.offset_at(line, character)])
    if call is None:
        return None
    name, active = call

    signature = extract_function_signatures(source).get(name)
    if signature is None:
        return None

    params = [f"{ptype} {pname}" for pname, ptype in signature.parameters.items()]
    sig_info = types.SignatureInformation(
        label=signature.label,
        parameters=[types.ParameterInformation(label=p) for p in params],
    )
    active_param = min(active, max(len(params) - 1, 0))
    return types.SignatureHelp(signatures=[sig_info], active_signature=0, active_parameter=active_param)


def _open_call(prefix: str) -> Optional[Tuple[str, int]]:
    """Innermost call still open at the end of `prefix`, with its top-level comma count."""
    # Each frame is [callee or None for brackets, comma count].
    stack: List[list] = []
    quote: str | None = None
    previous = ""
    for match in SCAN_RE.finditer(prefix):
        token = match.group(0)
        if quote:
            if token == quote:
                quote = None
            continue
        if token in ("\"", "'"):
            quote = token
        elif token == "(":
            stack.append([previous if IDENT_RE.match(previous) else None, 0])
        elif token in ("[", "{"):
            stack.append([None, 0])
        elif token in (")", "]", "}"):
            if stack:
                stack.pop()
        elif token == ",":
            if stack:
                stack[-1][1] += 1
        elif token == ";":
            stack.clear()
        previous = token

    for callee, commas in reversed(stack):
        if callee is not None:
            return callee, commas
    return None
