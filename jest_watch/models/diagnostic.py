"""Models for failure diagnostics bound to a source position."""

from dataclasses import dataclass
from typing import Literal

DIAGNOSTIC_SOURCE = "jest-watch"


@dataclass(frozen=True, kw_only=True)
class Diagnostic:
    """A failure message anchored at a 0-based line and column."""

    line: int
    col: int
    message: str
    severity: Literal["error", "warning"] = "error"
    source: str = DIAGNOSTIC_SOURCE
