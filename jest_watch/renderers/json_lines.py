"""Renderer that streams marks and diagnostics as JSON lines.

Meant for editor integrations that spawn ``jest-watch`` and draw the
events themselves; every event is one JSON object on its own line.
"""

import dataclasses
import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from jest_watch.config import WatchConfig
from jest_watch.models.diagnostic import Diagnostic
from jest_watch.renderers.base import Renderer
from jest_watch.renderers.manifest import RendererManifest
from jest_watch.renderers.marks import Mark


@dataclass(kw_only=True)
class JsonLinesRenderer(Renderer):
    """Writes ``mark``, ``diagnostics`` and ``clear`` events to a stream."""

    stream: TextIO = field(default_factory=lambda: sys.stdout, repr=False)
    _next_handle: int = 1

    def update_mark(self, path: Path, mark: Mark, handle: int | None) -> int:
        """Emit a mark event, allocating a handle when needed."""
        if handle is None:
            handle = self._next_handle
            self._next_handle += 1
        self._emit(
            {
                "event": "mark",
                "path": str(path),
                "handle": handle,
                **dataclasses.asdict(mark),
            }
        )
        return handle

    def set_diagnostics(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        """Emit the full diagnostic set of a file."""
        self._emit(
            {
                "event": "diagnostics",
                "path": str(path),
                "diagnostics": [dataclasses.asdict(d) for d in diagnostics],
            }
        )

    def clear(self, path: Path) -> None:
        """Emit a clear event."""
        self._emit({"event": "clear", "path": str(path)})

    def _emit(self, event: dict[str, Any]) -> None:
        self.stream.write(json.dumps(event) + "\n")
        self.stream.flush()


def create_json_lines_renderer(config: WatchConfig) -> JsonLinesRenderer:
    """Create a renderer writing to stdout."""
    return JsonLinesRenderer()


json_lines_renderer_manifest = RendererManifest(
    description="Stream marks and diagnostics as JSON lines on stdout",
    renderer_factory=create_json_lines_renderer,
)
