from __future__ import annotations

from dataclasses import dataclass

SCRIPT_OPEN = "<cfscript>"
SCRIPT_CLOSE = "</cfscript>"
OUTPUT_OPEN = "<cfoutput"
OUTPUT_CLOSE = "</cfoutput"


@dataclass(frozen=True)
class ScopeState:
    """Two independent flags, updated once per line.

    There is no nesting. When a line holds both the open and the close marker
    of one construct, the open marker is checked first and wins.
    """

    in_script: bool = False
    in_output: bool = False

    @property
    def active(self) -> bool:
        return self.in_script or self.in_output

    def advance(self, line: str) -> "ScopeState":
        lowered = line.lower()
        return ScopeState(
            in_script=_toggle(lowered, SCRIPT_OPEN, SCRIPT_CLOSE, self.in_script),
            in_output=_toggle(lowered, OUTPUT_OPEN, OUTPUT_CLOSE, self.in_output),
        )


def _toggle(line: str, opener: str, closer: str, current: bool) -> bool:
    if opener in line:
        return True
    if closer in line:
        return False
    return current
