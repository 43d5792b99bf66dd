"""Compute where and how an identifier's status is drawn."""

from dataclasses import dataclass

from jest_watch.config import WatchConfig
from jest_watch.models.identifier import Identifier


@dataclass(frozen=True, kw_only=True)
class Mark:
    """A status indicator at a 0-based position."""

    line: int
    col: int
    text: str
    hl_group: str
    virt_lines_above: bool = False


def build_mark(identifier: Identifier, config: WatchConfig) -> Mark:
    """Build the mark for an identifier's current status.

    In ``above`` mode the mark goes on a virtual line over the declaration,
    indented to its column; an "each" variant is drawn over its table
    declaration instead of the table entry. Line 0 has nothing above it, so
    it is always drawn inline.
    """
    style = config.style_for(identifier.status)
    parts = []
    if config.show_icon:
        parts.append(style.icon)
    if config.show_text:
        parts.append(style.text)
    text = " ".join(parts)

    line, col = identifier.line, identifier.col
    if config.mode == "above" and line != 0:
        if identifier.above is not None:
            line, col = identifier.above.line, identifier.above.col
        return Mark(
            line=line,
            col=col,
            text=" " * col + text,
            hl_group=style.hl_group,
            virt_lines_above=True,
        )

    return Mark(line=line, col=col, text=text, hl_group=style.hl_group)
