"""Abstract base class for status renderers."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from jest_watch.models.diagnostic import Diagnostic
from jest_watch.renderers.marks import Mark


class Renderer(ABC):
    """Draws marks and diagnostics for tracked files.

    Handles returned by ``update_mark`` are opaque to callers; passing one
    back updates the existing mark instead of creating a new one.
    """

    @abstractmethod
    def update_mark(self, path: Path, mark: Mark, handle: int | None) -> int:
        """Create or update a mark and return its handle.

        Args:
            path: Tracked test file
            mark: Position, text and highlight of the mark
            handle: Handle from a previous call for the same identifier

        Returns:
            Handle to pass back on the next update

        """

    @abstractmethod
    def set_diagnostics(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics shown for a file."""

    @abstractmethod
    def clear(self, path: Path) -> None:
        """Remove every mark and diagnostic of a file."""
