"""Tests for the generated Jest query and its capture names."""

from pathlib import Path

import pytest

from jest_watch.syntax.captures import CAPTURES
from jest_watch.syntax.query import (
    DESCRIBE_CALLEES,
    TEST_CALLEES,
    UnsupportedLanguageError,
    _callee_pattern,
    build_query_source,
    language_for_path,
)
from jest_watch.testing.captures import capture


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("sum.test.js", "javascript"),
        ("sum.spec.jsx", "javascript"),
        ("sum.test.mjs", "javascript"),
        ("sum.test.ts", "typescript"),
        ("SUM.TEST.TS", "typescript"),
        ("sum.test.cts", "typescript"),
        ("App.test.tsx", "tsx"),
    ],
)
def test_language_for_path(name: str, expected: str) -> None:
    """Suffixes select the grammar, case-insensitively."""
    assert language_for_path(Path(name)) == expected


def test_language_for_path_unsupported() -> None:
    """Unknown suffixes are rejected with the supported list."""
    with pytest.raises(UnsupportedLanguageError, match="No Jest grammar for 'test.py'"):
        language_for_path(Path("test.py"))


def test_query_uses_every_capture_name() -> None:
    """Every known capture can be produced by some pattern."""
    source = build_query_source()

    for name in CAPTURES:
        assert f"@{name} " in source or f"@{name})" in source or source.endswith(
            f"@{name}"
        ), name


def test_query_pattern_count() -> None:
    """Root-level tests and describes, plus every root and child pairing."""
    tests = sum(len(shapes) for shapes in TEST_CALLEES.values())
    describes = sum(len(shapes) for shapes in DESCRIBE_CALLEES.values())

    patterns = build_query_source().split("\n")

    assert len(patterns) == tests + describes + describes * (tests + describes)
    assert sum(p.startswith("(program") for p in patterns) == tests + describes


def test_query_matches_callee_names() -> None:
    """Callee names and properties are restricted by predicates."""
    source = build_query_source()

    assert '(#any-of? @_child.fn "xit" "xtest")' in source
    assert '(#any-of? @_child.prop "skip" "todo")' in source
    assert '(#any-of? @_root.fn "fdescribe")' in source
    assert '(#eq? @_root.each "each")' in source


def test_callee_pattern_shapes() -> None:
    """Each shape renders a function field and its predicates."""
    function, predicates = _callee_pattern(("member", ("test",), ("only",)), "child")

    assert function == (
        "function: (member_expression object: (identifier) @_child.fn"
        " property: (property_identifier) @_child.prop)"
    )
    assert predicates == (
        '(#any-of? @_child.fn "test") (#any-of? @_child.prop "only")'
    )


def test_callee_pattern_unknown_shape() -> None:
    """An unknown shape is a programming error."""
    with pytest.raises(ValueError, match="Unknown callee shape: spread"):
        _callee_pattern(("spread", ("test",), ()), "child")


@pytest.mark.parametrize(
    ("name", "kind", "status", "only", "role"),
    [
        ("describe", "root", "loading", False, "declaration"),
        ("describe_each_only", "root", "loading", True, "each"),
        ("idescribe_skip", "describe", "pending", False, "declaration"),
        ("test_only", "test", "loading", True, "declaration"),
        ("test_each_skip", "test", "pending", False, "each"),
    ],
)
def test_capture_specs(
    name: str, kind: str, status: str, only: bool, role: str
) -> None:
    """Capture names encode kind, static status and only."""
    spec = CAPTURES[name]

    assert (spec.kind, spec.status, spec.only, spec.role) == (kind, status, only, role)


def test_capture_rank_orders_root_child_and_arguments() -> None:
    """Roots sort before children, children before argument markers."""
    captures = [
        capture("args", 3),
        capture("inner_args", 2),
        capture("test", 2),
        capture("describe_each", 0),
    ]

    ordered = sorted(captures, key=lambda c: c.spec.rank)

    assert [c.spec.name for c in ordered] == [
        "describe_each",
        "test",
        "inner_args",
        "args",
    ]


def test_capture_to_identifier() -> None:
    """A capture becomes a fresh identifier with its static metadata."""
    identifier = capture("idescribe_only", 4, 2, 9).to_identifier()

    assert (identifier.line, identifier.col, identifier.end_line) == (4, 2, 9)
    assert identifier.kind == "describe"
    assert identifier.only
    assert identifier.status == "loading"
    assert identifier.parent is None
