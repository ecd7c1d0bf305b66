from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from lsprotocol import types

from .keywords import is_builtin_scope
from .source_context import SourceContext
from .symbols import DEFAULT_PARAM_TYPE, FunctionSignature, extract_function_signatures, iter_function_bodies
from .type_inference import binding_before, infer_variable_types

log = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def resolve_hover(text: str, word: str, offset: int) -> Optional[str]:
    """Resolve the hover string for `word` at `offset`.

    Priority: built-in scope, then function argument, then the type of the most
    recent assignment before the cursor.
    """
    if not IDENTIFIER_RE.match(word):
        return None
    if is_builtin_scope(word):
        return f"Scope: **{word}**"

    functions = extract_function_signatures(text)
    argument_type = _argument_type(text, word, functions)
    if argument_type is not None:
        return f"Argument: **{word}** : _{argument_type}_"

    binding = binding_before(infer_variable_types(text, functions), word, offset)
    if binding is not None:
        return f"Variable: **{word}** : _{binding.type}_"
    return None


def hover_for_position(source: str, line: int, character: int) -> Optional[types.Hover]:
    ctx = SourceContext(source)
    word, start, end = ctx.word_at(line, character)
    if not word:
        return None
    contents = resolve_hover(source, word, ctx.offset_at(line, character))
    if contents is None:
        return None
    log.debug("Hover for %r at %d:%d -> %s", word, line, character, contents)
    return types.Hover(
        contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=contents),
        range=types.Range(
            start=types.Position(line=line, character=start),
            end=types.Position(line=line, character=end),
        ),
    )


def _argument_type(text: str, word: str, functions: Dict[str, FunctionSignature]) -> Optional[str]:
    pattern = re.compile(rf"\b{re.escape(word)}\b")
    for body in iter_function_bodies(text):
        if word not in body.parameters or not pattern.search(body.text):
            continue
        signature = functions.get(body.name)
        if signature is not None and word in signature.parameters:
            return signature.parameters[word]
        return body.parameters.get(word, DEFAULT_PARAM_TYPE)
    return None
