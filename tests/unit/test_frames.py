"""Tests for reassembling Jest results payloads."""

import json

from jest_watch.frames import FrameAssembler

PAYLOAD = {
    "numTotalTests": 1,
    "success": True,
    "testResults": [{"name": "/p/a.test.js", "assertionResults": []}],
}


def test_returns_complete_payload_from_single_piece() -> None:
    """A payload on one line is parsed immediately."""
    assembler = FrameAssembler()

    assert assembler.feed(json.dumps(PAYLOAD)) == [PAYLOAD]
    assert not assembler.pending


def test_discards_noise_when_idle() -> None:
    """Progress output outside a payload is ignored."""
    assembler = FrameAssembler()

    assert assembler.feed("Determining test suites to run...") == []
    assert assembler.feed('{"unrelated": true}') == []
    assert assembler.feed("") == []
    assert not assembler.pending


def test_joins_split_payload_without_separator() -> None:
    """Pieces are concatenated until they parse."""
    assembler = FrameAssembler()
    text = json.dumps(PAYLOAD)
    split = text.index("numTotalTests") + 20
    first, second, third = text[:split], text[split : split + 20], text[split + 20 :]

    assert assembler.feed(first) == []
    assert assembler.pending
    assert assembler.feed(second) == []
    assert assembler.feed(third) == [PAYLOAD]
    assert not assembler.pending


def test_keeps_collecting_noise_once_started() -> None:
    """Pieces fed while collecting are appended even if they look like noise."""
    assembler = FrameAssembler()
    text = json.dumps(PAYLOAD)

    assembler.feed(text[:-1])

    assert assembler.feed("}") == [PAYLOAD]


def test_emits_consecutive_payloads() -> None:
    """Every complete payload is returned once."""
    assembler = FrameAssembler()
    second = {**PAYLOAD, "numTotalTests": 2}

    assert assembler.feed(json.dumps(PAYLOAD)) == [PAYLOAD]
    assert assembler.feed(json.dumps(second)) == [second]


def test_reset_drops_partial_payload() -> None:
    """After reset, a stale fragment no longer corrupts the next payload."""
    assembler = FrameAssembler()
    assembler.feed(json.dumps(PAYLOAD)[:15])

    assembler.reset()

    assert not assembler.pending
    assert assembler.feed(json.dumps(PAYLOAD)) == [PAYLOAD]


def test_custom_marker() -> None:
    """The marker that starts a payload is configurable."""
    assembler = FrameAssembler(marker="results")

    assert assembler.feed(json.dumps(PAYLOAD)) == []
    assert assembler.feed('{"results": []}') == [{"results": []}]


def test_noise_around_split_payload_yields_one_object() -> None:
    """Summary lines before and after a split payload are discarded."""
    assembler = FrameAssembler()
    text = json.dumps(PAYLOAD)
    payloads = []

    for piece in ["Suites: 1 passed", text[:25], text[25:], "Test Suites: 1 passed"]:
        payloads.extend(assembler.feed(piece))

    assert payloads == [PAYLOAD]
    assert json.dumps(payloads[0]) == text
