"""Capture names produced by the Jest query and what each one means."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from jest_watch.models.identifier import Identifier, IdentifierKind, IdentifierStatus

type CaptureRole = Literal["declaration", "each", "inner_args", "args"]


@dataclass(frozen=True, kw_only=True)
class CaptureSpec:
    """Static meaning of a capture name, resolved when the query is compiled."""

    name: str
    role: CaptureRole
    kind: IdentifierKind
    status: IdentifierStatus = "loading"
    only: bool = False

    @property
    def rank(self) -> int:
        """Processing order within a match: root, child, inner_args, args."""
        if self.role == "inner_args":
            return 2
        if self.role == "args":
            return 3
        return 0 if self.kind == "root" else 1


@dataclass(frozen=True, kw_only=True)
class CaptureRange:
    """0-based start position and end line of a captured node."""

    line: int
    col: int
    end_line: int


@dataclass(frozen=True, kw_only=True)
class Capture:
    """A single named capture within a query match."""

    spec: CaptureSpec
    range: CaptureRange

    def to_identifier(self) -> Identifier:
        """Create a fresh identifier from the capture's position and meaning."""
        return Identifier(
            line=self.range.line,
            col=self.range.col,
            end_line=self.range.end_line,
            kind=self.spec.kind,
            status=self.spec.status,
            only=self.spec.only,
        )


def _declarations(prefix: str, kind: IdentifierKind) -> dict[str, CaptureSpec]:
    specs: dict[str, CaptureSpec] = {}
    for role, suffix in (("declaration", ""), ("each", "_each")):
        for variant, status, only in (
            ("", "loading", False),
            ("_only", "loading", True),
            ("_skip", "pending", False),
        ):
            name = f"{prefix}{suffix}{variant}"
            specs[name] = CaptureSpec(
                name=name, role=role, kind=kind, status=status, only=only
            )
    return specs


CAPTURES: Mapping[str, CaptureSpec] = {
    **_declarations("describe", "root"),
    **_declarations("idescribe", "describe"),
    **_declarations("test", "test"),
    "inner_args": CaptureSpec(name="inner_args", role="inner_args", kind="test"),
    "args": CaptureSpec(name="args", role="args", kind="root"),
}

