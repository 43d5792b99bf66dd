"""Build the test/describe structure of a file from query matches."""

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from jest_watch.models.identifier import Identifier, IdentifierKind
from jest_watch.syntax.captures import Capture
from jest_watch.syntax.query import language_for_path, parse_matches

log = logging.getLogger(__name__)


class IdentifierBuilder:
    """Accumulates identifiers over the matches of one file.

    Matches are processed independently; only the identifier mapping and the
    file-level "saw only" flag carry over between them. Call ``finish`` once
    every match has been added.
    """

    def __init__(self) -> None:
        self.identifiers: dict[int, Identifier] = {}
        self.saw_only = False
        self._parent: Identifier | None = None
        self._holding: Identifier | None = None
        self._each: dict[IdentifierKind, Identifier] = {}

    def add_match(self, match: Sequence[Capture]) -> None:
        """Register the identifiers described by a single match."""
        self._parent = None
        self._holding = None
        self._each = {}

        for capture in sorted(match, key=lambda c: c.spec.rank):
            props = capture.to_identifier()
            role = capture.spec.role
            if role == "each":
                # location of the generated tests comes with the arguments
                self._each[props.kind] = props
            elif role == "inner_args":
                self._add_each(props, self._each.get("test") or self._each.get("describe"))
            elif role == "args":
                self._add_each(props, self._each.get("root"))
            else:
                self._add(props)

        if self._holding is not None:
            held, self._holding = self._holding, None
            self._add(held)

    def finish(self) -> dict[int, Identifier]:
        """Apply the "only" correction pass and return the mapping."""
        if self.saw_only:
            for identifier in self.identifiers.values():
                parent = identifier.parent
                if (
                    not identifier.only
                    and not identifier.has_only
                    and (parent is None or not parent.only)
                    and identifier.status != "pending"
                ):
                    identifier.status = "pending"
        return self.identifiers

    def _add(self, props: Identifier) -> None:
        if props.kind != "root" and "root" in self._each:
            # the root is an unresolved "each": its line is not known until
            # its arguments are seen
            self._holding = props
        elif (existing := self.identifiers.get(props.line)) is None:
            parent = self._parent
            if parent is not None and parent.status == "pending":
                props.status = "pending"
            if props.only:
                self._mark_only()
            props.has_only = False
            props.parent = parent
            self.identifiers[props.line] = props
        elif self._parent is not None and existing.parent is None:
            # first seen as the root of its own children's matches
            existing.parent = self._parent
            if existing.kind == "root" and props.kind == "describe":
                existing.kind = "describe"

        if props.kind == "root" and self._parent is None:
            self._parent = self.identifiers.get(props.line)

    def _add_each(self, props: Identifier, each: Identifier | None) -> None:
        if (existing := self.identifiers.get(props.line)) is not None:
            existing.end_line = props.end_line
        if each is None:
            return
        del self._each[each.kind]

        self._add(
            dataclasses.replace(
                props,
                kind=each.kind,
                end_line=each.end_line,
                only=each.only,
                status=each.status,
                above=each,
            )
        )

    def _mark_only(self) -> None:
        self.saw_only = True
        parent = self._parent
        while parent is not None and not parent.has_only:
            parent.has_only = True
            parent = parent.parent


def extract_identifiers(matches: Iterable[Sequence[Capture]]) -> dict[int, Identifier]:
    """Build the line -> identifier mapping for one file's query matches."""
    builder = IdentifierBuilder()
    for match in matches:
        builder.add_match(match)
    return builder.finish()


def extract_file_identifiers(path: Path, source: bytes) -> Mapping[int, Identifier]:
    """Parse a test file and extract its identifiers.

    Parsing is cached by source text; the identifiers are rebuilt on every
    call so statuses from a previous run never leak into a new one.
    """
    matches = parse_matches(language_for_path(path), source)
    identifiers = extract_identifiers(matches)
    log.debug(
        "Extracted %d identifier(s) from %s (%d match(es))",
        len(identifiers),
        path.name,
        len(matches),
    )
    return identifiers
