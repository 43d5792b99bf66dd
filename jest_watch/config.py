"""Configuration for tracking Jest watch results."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field, ValidationError

from jest_watch.models.base import Model
from jest_watch.models.identifier import IdentifierStatus

log = logging.getLogger(__name__)

JEST_ARGS = (
    "--watch",
    "--silent",
    "--forceExit",
    "--json",
    "--testLocationInResults",
    "--no-colors",
    "--coverage=false",
)


class StatusStyle(Model):
    """How a status is drawn next to a test."""

    icon: str
    text: str
    hl_group: str


class WatchConfig(Model):
    """Options for marks, project discovery and the Jest command."""

    mode: Literal["above", "inline"] = Field(
        default="above", description="Draw marks on a line above or at line end"
    )
    show_icon: bool = True
    show_text: bool = True
    passed: StatusStyle = StatusStyle(icon="✓", text="passed", hl_group="DiagnosticOk")
    failed: StatusStyle = StatusStyle(
        icon="✗", text="failed", hl_group="DiagnosticError"
    )
    skipped: StatusStyle = StatusStyle(
        icon="○", text="skipped", hl_group="DiagnosticWarn"
    )
    loading: StatusStyle = StatusStyle(
        icon="…", text="running", hl_group="DiagnosticInfo"
    )
    jest_command: str | None = Field(
        default=None,
        description="Command used to run Jest (defaults to the project's jest binary)",
    )
    root_markers: Sequence[str] = Field(
        default=("package.json",),
        description="Files marking the project root, searched upward from the test",
    )
    jest_args: Sequence[str] = Field(default=JEST_ARGS)
    poll_interval: float = Field(
        default=0.25, gt=0, description="Seconds between checks for file saves"
    )

    def style_for(self, status: IdentifierStatus) -> StatusStyle:
        """Return the style for a status; pending tests use ``skipped``."""
        if status == "pending":
            return self.skipped
        style: StatusStyle = getattr(self, status)
        return style


async def load_config(path: Path | None) -> WatchConfig:
    """Load configuration from a YAML file, or defaults when no path is given.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, not YAML, or fails validation

    """
    if path is None:
        return WatchConfig()

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = await asyncio.to_thread(path.read_text)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {path}")

    try:
        config = WatchConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config schema in {path}: {e}") from e

    log.debug("Loaded config from %s", path)
    return config
