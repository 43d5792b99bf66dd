"""Tree-sitter query for Jest test declarations.

The query is generated from the callee shapes Jest accepts (``test``,
``it.only``, ``describe.skip.each`` ...). Each pattern produces one match
made of:

    root?       the describe call whose callback directly holds the child
    child       the test or nested describe call
    inner_args  the child's argument list
    args?       the root's argument list

A root-level test has no root capture and a childless root-level describe
has no child capture.
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Literal

from tree_sitter import Language, Node, Parser, Query, QueryCursor
from tree_sitter_language_pack import get_language

from jest_watch.syntax.captures import CAPTURES, Capture, CaptureRange, CaptureSpec

log = logging.getLogger(__name__)

type LanguageName = Literal["javascript", "typescript", "tsx"]
type Match = Sequence[Capture]

SUFFIX_TO_LANGUAGE: Mapping[str, LanguageName] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# (shape, callee names, property names) per capture-name variant
type Callee = tuple[str, Sequence[str], Sequence[str]]

TEST_CALLEES: Mapping[str, Sequence[Callee]] = {
    "": [("ident", ("test", "it"), ())],
    "_only": [
        ("ident", ("fit",), ()),
        ("member", ("test", "it"), ("only",)),
    ],
    "_skip": [
        ("ident", ("xit", "xtest"), ()),
        ("member", ("test", "it"), ("skip", "todo")),
    ],
    "_each": [("ident_each", ("test", "it"), ())],
    "_each_only": [
        ("ident_each", ("fit",), ()),
        ("member_each", ("test", "it"), ("only",)),
    ],
    "_each_skip": [
        ("ident_each", ("xit", "xtest"), ()),
        ("member_each", ("test", "it"), ("skip",)),
    ],
}

DESCRIBE_CALLEES: Mapping[str, Sequence[Callee]] = {
    "": [("ident", ("describe",), ())],
    "_only": [
        ("ident", ("fdescribe",), ()),
        ("member", ("describe",), ("only",)),
    ],
    "_skip": [
        ("ident", ("xdescribe",), ()),
        ("member", ("describe",), ("skip",)),
    ],
    "_each": [("ident_each", ("describe",), ())],
    "_each_only": [
        ("ident_each", ("fdescribe",), ()),
        ("member_each", ("describe",), ("only",)),
    ],
    "_each_skip": [
        ("ident_each", ("xdescribe",), ()),
        ("member_each", ("describe",), ("skip",)),
    ],
}


class UnsupportedLanguageError(Exception):
    """Raised when a file suffix has no known grammar."""


def language_for_path(path: Path) -> LanguageName:
    """Pick the grammar for a test file from its suffix."""
    try:
        return SUFFIX_TO_LANGUAGE[path.suffix.lower()]
    except KeyError:
        raise UnsupportedLanguageError(
            f"No Jest grammar for '{path.name}'. "
            f"Supported suffixes: {sorted(SUFFIX_TO_LANGUAGE)}"
        ) from None


def _quoted(values: Sequence[str]) -> str:
    return " ".join(f'"{value}"' for value in values)


def _callee_pattern(callee: Callee, tag: str) -> tuple[str, str]:
    """Render the ``function:`` field of a call for one callee shape.

    Returns the field pattern and the predicates that go at the end of the
    enclosing call pattern.
    """
    shape, names, props = callee
    fn = f"@_{tag}.fn"
    prop = f"@_{tag}.prop"
    each = f"@_{tag}.each"
    fn_pred = f"(#any-of? {fn} {_quoted(names)})"
    prop_pred = f"(#any-of? {prop} {_quoted(props)})"
    each_pred = f'(#eq? {each} "each")'

    if shape == "ident":
        return f"function: (identifier) {fn}", fn_pred
    if shape == "member":
        return (
            f"function: (member_expression"
            f" object: (identifier) {fn}"
            f" property: (property_identifier) {prop})",
            f"{fn_pred} {prop_pred}",
        )
    if shape == "ident_each":
        return (
            f"function: (call_expression"
            f" function: (member_expression"
            f" object: (identifier) {fn}"
            f" property: (property_identifier) {each}))",
            f"{fn_pred} {each_pred}",
        )
    if shape == "member_each":
        return (
            f"function: (call_expression"
            f" function: (member_expression"
            f" object: (member_expression"
            f" object: (identifier) {fn}"
            f" property: (property_identifier) {prop})"
            f" property: (property_identifier) {each}))",
            f"{fn_pred} {prop_pred} {each_pred}",
        )
    raise ValueError(f"Unknown callee shape: {shape}")


def _variants(
    prefix: str, callees: Mapping[str, Sequence[Callee]]
) -> Iterator[tuple[str, Callee]]:
    for variant, shapes in callees.items():
        for callee in shapes:
            yield f"{prefix}{variant}", callee


def _call(capture_name: str, callee: Callee, tag: str, args_capture: str) -> str:
    function, predicates = _callee_pattern(callee, tag)
    return (
        f"(call_expression {function}"
        f" arguments: (arguments) @{args_capture} {predicates}) @{capture_name}"
    )


def _suite_with_child(root: tuple[str, Callee], child: tuple[str, Callee]) -> str:
    root_name, root_callee = root
    child_name, child_callee = child
    child_call = _call(child_name, child_callee, "child", "inner_args")
    function, predicates = _callee_pattern(root_callee, "root")
    return (
        f"(call_expression {function}"
        f" arguments: (arguments"
        f" (_ (statement_block (expression_statement {child_call}))))"
        f" @args {predicates}) @{root_name}"
    )


def build_query_source() -> str:
    """Generate the full query text for every supported declaration shape."""
    roots = list(_variants("describe", DESCRIBE_CALLEES))
    nested = list(_variants("idescribe", DESCRIBE_CALLEES))
    tests = list(_variants("test", TEST_CALLEES))

    patterns: list[str] = []
    for name, callee in tests:
        call = _call(name, callee, "child", "inner_args")
        patterns.append(f"(program (expression_statement {call}))")
    for name, callee in roots:
        call = _call(name, callee, "root", "args")
        patterns.append(f"(program (expression_statement {call}))")
    for root in roots:
        for child in [*tests, *nested]:
            patterns.append(_suite_with_child(root, child))

    return "\n".join(patterns)


@lru_cache(maxsize=None)
def load_language(name: LanguageName) -> Language:
    """Load a grammar from the language pack."""
    return get_language(name)


@lru_cache(maxsize=None)
def compile_query(name: LanguageName) -> tuple[Query, Mapping[str, CaptureSpec]]:
    """Compile the Jest query for a grammar, once per process.

    Returns the query together with the capture specs it can produce, so
    matching never re-classifies capture names.
    """
    language = load_language(name)
    query = Query(language, build_query_source())
    specs = {
        capture_name: CAPTURES[capture_name]
        for capture_name in (
            query.capture_name(index) for index in range(query.capture_count)
        )
        if capture_name in CAPTURES
    }
    log.debug(
        "Compiled Jest query for %s (%d patterns)", name, query.pattern_count
    )
    return query, specs


def _capture_range(node: Node) -> CaptureRange:
    return CaptureRange(
        line=node.start_point.row,
        col=node.start_point.column,
        end_line=node.end_point.row,
    )


@lru_cache(maxsize=32)
def parse_matches(name: LanguageName, source: bytes) -> tuple[Match, ...]:
    """Parse source text and return its query matches.

    Results are cached by (grammar, source bytes), so unchanged text is never
    parsed twice. Captures within a match are ordered root, child,
    inner_args, args.
    """
    query, specs = compile_query(name)
    tree = Parser(load_language(name)).parse(source)
    cursor = QueryCursor(query)

    matches: list[Match] = []
    for _, capture_map in cursor.matches(tree.root_node):
        captures = [
            Capture(spec=specs[capture_name], range=_capture_range(nodes[0]))
            for capture_name, nodes in capture_map.items()
            if capture_name in specs and nodes
        ]
        captures.sort(key=lambda capture: capture.spec.rank)
        matches.append(tuple(captures))
    return tuple(matches)
