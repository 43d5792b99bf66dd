"""Reassemble Jest JSON payloads from streamed stdout pieces."""

import json
import logging
from typing import Any

log = logging.getLogger(__name__)

RESULTS_MARKER = "numTotalTests"


class FrameAssembler:
    """Collects stdout pieces until they form one complete JSON payload.

    A payload starts with a piece beginning with ``{`` that mentions
    ``RESULTS_MARKER``; pieces seen while nothing is being collected are
    progress noise and are discarded.
    """

    def __init__(self, marker: str = RESULTS_MARKER) -> None:
        self.marker = marker
        self._buffer = ""

    @property
    def pending(self) -> bool:
        """Whether a payload is partially collected."""
        return self._buffer != ""

    def feed(self, piece: str) -> list[Any]:
        """Add one stdout piece, returning the payloads it completed."""
        if not self._buffer and not (
            piece.startswith("{") and self.marker in piece
        ):
            return []

        self._buffer += piece
        try:
            payload = json.loads(self._buffer)
        except json.JSONDecodeError:
            log.debug("Collecting results payload (%d chars)", len(self._buffer))
            return []

        self._buffer = ""
        return [payload]

    def reset(self) -> None:
        """Drop any partially collected payload."""
        self._buffer = ""
