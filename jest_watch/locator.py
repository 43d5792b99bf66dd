"""Locate failures inside test bodies from Jest stack traces."""

import re
from dataclasses import dataclass, field

from jest_watch.models.diagnostic import Diagnostic
from jest_watch.models.identifier import Identifier


@dataclass(frozen=True, kw_only=True)
class StackFrame:
    """A 0-based position referenced by a stack trace line."""

    line: int
    col: int


@dataclass(frozen=True, kw_only=True)
class DiagnosticLocator:
    """Find stack frames that point into the tracked test file."""

    test_file_name: str
    _pattern: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_pattern",
            re.compile(rf"at .*{re.escape(self.test_file_name)}:(\d+):(\d+)"),
        )

    def find_frame(self, line: str) -> StackFrame | None:
        """Extract the test-file frame referenced by a stack trace line."""
        if self.test_file_name not in line:
            return None
        if (match := self._pattern.search(line)) is None:
            return None
        return StackFrame(line=int(match.group(1)) - 1, col=int(match.group(2)) - 1)

    def locate(self, identifier: Identifier, message: str) -> Diagnostic:
        """Build a diagnostic for a failure within an identifier's body.

        The deepest frame inside the identifier's line range wins, and the
        message is cut where the trace moves on to other frames. Without a
        frame in range the diagnostic sits at the identifier's declaration
        and keeps the whole message.
        """
        kept: list[str] = []
        found: StackFrame | None = None

        for message_line in message.split("\n"):
            frame = self.find_frame(message_line)
            frame_line = frame.line if frame is not None else None
            if frame is not None and identifier.contains_line(frame.line):
                found = frame
            if found is not None and found.line != frame_line:
                break
            kept.append(message_line)

        if found is None:
            return Diagnostic(line=identifier.line, col=identifier.col, message=message)

        # the last kept line is the frame itself
        kept.pop()
        while kept and not kept[-1].strip():
            kept.pop()
        return Diagnostic(line=found.line, col=found.col, message="\n".join(kept))
