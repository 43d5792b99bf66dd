"""Build query captures by name, for extractor tests."""

from jest_watch.syntax.captures import CAPTURES, Capture, CaptureRange


def capture(name: str, line: int, col: int = 0, end_line: int | None = None) -> Capture:
    """Build a capture; ``end_line`` defaults to the start line."""
    return Capture(
        spec=CAPTURES[name],
        range=CaptureRange(
            line=line, col=col, end_line=line if end_line is None else end_line
        ),
    )
