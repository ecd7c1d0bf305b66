"""Literal masking for the line-oriented scanners.

Quote detection is a parity check on the current line only: an offset is inside
a string when an odd number of quotes of the same kind sits on each side of it.
Doubled (escaped) quotes and literals spanning several lines are not handled.
"""

from __future__ import annotations

import re

NUMERIC_RE = re.compile(r"^\d+$|^\d+\.\d+$")
QUOTE_CHARS = ('"', "'")


def is_inside_string_literal(line: str, index: int) -> bool:
    before = line[:index]
    after = line[index:]
    for quote in QUOTE_CHARS:
        if before.count(quote) % 2 == 1 and after.count(quote) % 2 == 1:
            return True
    return False


def is_numeric_literal(text: str) -> bool:
    return bool(NUMERIC_RE.match(text))
