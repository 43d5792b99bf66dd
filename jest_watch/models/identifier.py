"""Models for tests and suites discovered in a source file."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

type IdentifierKind = Literal["test", "describe", "root"]

type IdentifierStatus = Literal["pending", "loading", "passed", "failed"]


@dataclass(kw_only=True, eq=False)
class Identifier:
    """A test, a nested describe block, or an outer describe block.

    ``line`` and ``col`` are 0-based and ``line`` is unique within a file.
    Statuses are mutated in place while results for a run are reconciled.
    """

    line: int
    col: int
    end_line: int | None = None
    kind: IdentifierKind
    status: IdentifierStatus = "loading"
    only: bool = False
    has_only: bool = False
    parent: "Identifier | None" = field(default=None, repr=False)
    above: "Identifier | None" = field(default=None, repr=False)
    render_handle: int | None = field(default=None, repr=False)

    def ancestors(self) -> Iterator["Identifier"]:
        """Yield the parent chain, nearest first."""
        parent = self.parent
        while parent is not None:
            yield parent
            parent = parent.parent

    def contains_line(self, line: int) -> bool:
        """Check whether a 0-based line falls inside this identifier's body."""
        end_line = self.line if self.end_line is None else self.end_line
        return self.line <= line <= end_line
