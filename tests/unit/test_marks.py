"""Tests for computing status marks."""

from jest_watch.config import WatchConfig
from jest_watch.renderers.marks import Mark, build_mark
from jest_watch.testing.factories import IdentifierFactory


def test_above_mode_indents_to_declaration() -> None:
    """Marks go on a virtual line above, at the declaration's column."""
    identifier = IdentifierFactory.build(line=3, col=4, status="passed")

    mark = build_mark(identifier, WatchConfig())

    assert mark == Mark(
        line=3,
        col=4,
        text="    ✓ passed",
        hl_group="DiagnosticOk",
        virt_lines_above=True,
    )


def test_above_mode_first_line_is_inline() -> None:
    """Nothing fits above line 0, so its mark is inline."""
    identifier = IdentifierFactory.build(line=0, col=0, status="failed")

    mark = build_mark(identifier, WatchConfig())

    assert mark == Mark(line=0, col=0, text="✗ failed", hl_group="DiagnosticError")


def test_above_mode_each_uses_declaration_anchor() -> None:
    """A table-generated test is drawn over its each declaration."""
    declaration = IdentifierFactory.build(line=5, col=2)
    identifier = IdentifierFactory.build(
        line=8, col=4, status="pending", above=declaration
    )

    mark = build_mark(identifier, WatchConfig())

    assert (mark.line, mark.col) == (5, 2)
    assert mark.text == "  ○ skipped"
    assert mark.hl_group == "DiagnosticWarn"
    assert mark.virt_lines_above


def test_inline_mode() -> None:
    """Inline marks stay on the declaration line without indentation."""
    declaration = IdentifierFactory.build(line=5, col=2)
    identifier = IdentifierFactory.build(line=8, col=4, above=declaration)

    mark = build_mark(identifier, WatchConfig(mode="inline"))

    assert mark == Mark(line=8, col=4, text="… running", hl_group="DiagnosticInfo")


def test_icon_and_text_toggles() -> None:
    """Icon and text can each be hidden."""
    identifier = IdentifierFactory.build(line=0, col=0, status="passed")

    assert build_mark(identifier, WatchConfig(show_text=False)).text == "✓"
    assert build_mark(identifier, WatchConfig(show_icon=False)).text == "passed"
