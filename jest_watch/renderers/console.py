"""Renderer that reports statuses and diagnostics through logging."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from jest_watch.config import WatchConfig
from jest_watch.models.diagnostic import Diagnostic
from jest_watch.renderers.base import Renderer
from jest_watch.renderers.manifest import RendererManifest
from jest_watch.renderers.marks import Mark

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ConsoleRenderer(Renderer):
    """Keeps marks in memory and logs a summary after every run."""

    logger: logging.Logger = field(default=log, repr=False)
    marks: dict[Path, dict[int, Mark]] = field(default_factory=dict)
    _next_handle: int = 1

    def update_mark(self, path: Path, mark: Mark, handle: int | None) -> int:
        """Store the mark under its handle, allocating one when needed."""
        if handle is None:
            handle = self._next_handle
            self._next_handle += 1
        self.marks.setdefault(path, {})[handle] = mark
        self.logger.debug(
            "%s:%d:%d %s", path.name, mark.line + 1, mark.col + 1, mark.text.strip()
        )
        return handle

    def set_diagnostics(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        """Log the current marks of the file followed by its diagnostics."""
        self.logger.info("=" * 60)
        self.logger.info("Results for %s:", path.name)
        self.logger.info("=" * 60)
        for mark in sorted(
            self.marks.get(path, {}).values(), key=lambda m: (m.line, m.col)
        ):
            self.logger.info("%5d  %s", mark.line + 1, mark.text.strip())

        for diagnostic in diagnostics:
            self.logger.warning(
                "%s:%d:%d %s",
                path.name,
                diagnostic.line + 1,
                diagnostic.col + 1,
                diagnostic.message,
            )

    def clear(self, path: Path) -> None:
        """Forget every mark of the file."""
        self.marks.pop(path, None)


def create_console_renderer(config: WatchConfig) -> ConsoleRenderer:
    """Create a console renderer."""
    return ConsoleRenderer()


console_renderer_manifest = RendererManifest(
    description="Log statuses and diagnostics to stderr",
    renderer_factory=create_console_renderer,
)
