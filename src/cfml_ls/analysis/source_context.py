from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from typing import List

from lsprotocol import types

WORD_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class SourceContext:
    source: str
    lines: List[str] = field(init=False)
    line_starts: List[int] = field(init=False)

    def __post_init__(self) -> None:
        raw_lines = self.source.split("\n")
        starts = [0]
        for raw in raw_lines[:-1]:
            starts.append(starts[-1] + len(raw) + 1)
        object.__setattr__(self, "lines", [line.rstrip("\r") for line in raw_lines])
        object.__setattr__(self, "line_starts", starts)

    def line_text(self, line: int) -> str:
        if 0 <= line < len(self.lines):
            return self.lines[line]
        return ""

    def offset_at(self, line: int, character: int) -> int:
        """Clamp a (line, character) pair to a character offset in the source."""
        if line < 0:
            return 0
        if line >= len(self.line_starts):
            return len(self.source)
        return self.line_starts[line] + max(0, min(character, len(self.lines[line])))

    def position_at(self, offset: int) -> types.Position:
        offset = max(0, min(offset, len(self.source)))
        line = bisect.bisect_right(self.line_starts, offset) - 1
        return types.Position(line=line, character=offset - self.line_starts[line])

    def word_at(self, line: int, character: int) -> tuple[str, int, int]:
        """Return the word touching the cursor with its start/end columns on the line."""
        text = self.line_text(line)
        for match in WORD_RE.finditer(text):
            if match.start() <= character <= match.end():
                return match.group(0), match.start(), match.end()
        return "", character, character
