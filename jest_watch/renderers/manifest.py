"""Renderer plugins: the manifest each one registers and its lookup."""

from collections.abc import Callable
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from jest_watch.config import WatchConfig

if TYPE_CHECKING:
    from jest_watch.renderers.base import Renderer

ENTRY_POINT_GROUP = "jest_watch.renderers"


@dataclass(frozen=True, kw_only=True)
class RendererManifest:
    """Manifest describing a renderer plugin.

    The factory is only called once the renderer has been selected by key.
    """

    description: str
    renderer_factory: Callable[[WatchConfig], "Renderer"]


class RendererNotFoundError(Exception):
    """Raised when no renderer is registered under a key."""


class InvalidRendererError(Exception):
    """Raised when a registered entry point is not a renderer manifest."""


def load_renderer_manifest(key: str) -> RendererManifest:
    """Load the manifest registered under ``key``.

    Raises RendererNotFoundError listing the registered keys when ``key`` is
    unknown, and InvalidRendererError when the entry point loads anything
    other than a RendererManifest.
    """
    entries = entry_points(group=ENTRY_POINT_GROUP)
    try:
        entry = entries[key]
    except KeyError:
        raise RendererNotFoundError(
            f"Renderer '{key}' not found. "
            f"Available renderers: {sorted(entries.names)}"
        ) from None

    manifest = entry.load()
    if not isinstance(manifest, RendererManifest):
        raise InvalidRendererError(
            f"Renderer '{key}' ({entry.value}) is a "
            f"{type(manifest).__name__}, not a RendererManifest"
        )
    return manifest
