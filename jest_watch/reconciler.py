"""Reconcile Jest results with the identifiers of a test file."""

import logging
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from jest_watch.locator import DiagnosticLocator
from jest_watch.models.diagnostic import Diagnostic
from jest_watch.models.identifier import Identifier, IdentifierStatus
from jest_watch.models.jest import AssertionResult, TestFileResult

log = logging.getLogger(__name__)

ASSERTION_TO_STATUS: Mapping[str, IdentifierStatus] = {
    "passed": "passed",
    "failed": "failed",
    "pending": "pending",
    "skipped": "pending",
    "todo": "pending",
    "disabled": "pending",
}

FILE_LEVEL = Identifier(line=0, col=0, end_line=0, kind="root")


@dataclass(kw_only=True)
class ResultReconciler:
    """Applies one run's results to the identifiers of a file.

    ``on_update`` is called with every identifier whose status changed so its
    mark can be redrawn.
    """

    identifiers: Mapping[int, Identifier]
    locator: DiagnosticLocator
    on_update: Callable[[Identifier], None] = field(default=lambda _: None)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _children: dict[int, list[Identifier]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._children = defaultdict(list)
        for identifier in self.identifiers.values():
            if identifier.parent is not None:
                self._children[identifier.parent.line].append(identifier)

    def reconcile(self, results: Sequence[TestFileResult]) -> Sequence[Diagnostic]:
        """Apply all results of a run cycle and return its diagnostics."""
        for result in results:
            matched_any = False
            for assertion in result.assertion_results:
                identifier = self.find_identifier(assertion)
                if identifier is None:
                    log.debug(
                        "No identifier for assertion %r (location=%s)",
                        assertion.title,
                        assertion.location,
                    )
                    continue
                matched_any = True
                self.apply(identifier, assertion)

            # a suite-level message with no matched test means the file
            # itself failed to run
            if result.message and not matched_any:
                self.diagnostics.append(self.locator.locate(FILE_LEVEL, result.message))

        for identifier in self.identifiers.values():
            if identifier.status == "loading":
                self._set_status(identifier, "pending")

        return self.diagnostics

    def find_identifier(self, assertion: AssertionResult) -> Identifier | None:
        """Match an assertion by declared line, then by its stack trace."""
        if (declared := assertion.declared_line) is not None:
            if (identifier := self.identifiers.get(declared - 1)) is not None:
                return identifier

        if not assertion.failure_messages:
            return None
        for line in assertion.failure_messages[0].split("\n"):
            if not line:
                continue
            frame = self.locator.find_frame(line)
            if frame is not None and (identifier := self.identifiers.get(frame.line)):
                return identifier
        return None

    def apply(self, identifier: Identifier, assertion: AssertionResult) -> None:
        """Update an identifier from its assertion result."""
        status = ASSERTION_TO_STATUS.get(assertion.status)
        if status == "failed":
            self.mark_failed(identifier)
            message = assertion.failure_messages[0] if assertion.failure_messages else ""
            self.diagnostics.append(self.locator.locate(identifier, message))
        elif status == "passed":
            self.mark_passed(identifier)
        elif status == "pending":
            self._set_status(identifier, "pending")
            if identifier.parent is not None:
                self._settle(identifier.parent)

    def mark_passed(self, identifier: Identifier) -> None:
        """Pass an identifier and its ancestors.

        The walk stops at an ancestor that is already passed or failed, or
        that still waits on another child's result.
        """
        node: Identifier | None = identifier
        while node is not None:
            self._set_status(node, "passed")
            node = node.parent
            if node is not None and (
                node.status in ("passed", "failed") or self._has_loading_child(node)
            ):
                break

    def mark_failed(self, identifier: Identifier) -> None:
        """Fail an identifier and every ancestor up to one already failed."""
        node: Identifier | None = identifier
        while node is not None:
            self._set_status(node, "failed")
            node = node.parent
            if node is not None and node.status == "failed":
                break

    def _settle(self, suite: Identifier) -> None:
        """Pass a waiting suite once its last loading child resolved."""
        children = self._children[suite.line]
        if (
            suite.status == "loading"
            and not self._has_loading_child(suite)
            and any(child.status == "passed" for child in children)
        ):
            self.mark_passed(suite)

    def _has_loading_child(self, identifier: Identifier) -> bool:
        return any(
            child.status == "loading" for child in self._children[identifier.line]
        )

    def _set_status(self, identifier: Identifier, status: IdentifierStatus) -> None:
        identifier.status = status
        self.on_update(identifier)
