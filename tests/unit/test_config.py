"""Tests for configuration loading."""

from pathlib import Path

import pytest

from jest_watch.config import JEST_ARGS, StatusStyle, WatchConfig, load_config


async def test_load_config_defaults() -> None:
    """No path means the default configuration."""
    config = await load_config(None)

    assert config == WatchConfig()
    assert config.mode == "above"
    assert config.jest_args == JEST_ARGS
    assert config.root_markers == ("package.json",)


async def test_load_config_from_yaml(tmp_path: Path) -> None:
    """Values from the file override defaults."""
    path = tmp_path / "jest-watch.yaml"
    path.write_text(
        """
mode: inline
show_text: false
jest_command: yarn jest
failed:
  icon: "!"
  text: broken
  hl_group: ErrorMsg
"""
    )

    config = await load_config(path)

    assert config.mode == "inline"
    assert not config.show_text
    assert config.jest_command == "yarn jest"
    assert config.failed == StatusStyle(icon="!", text="broken", hl_group="ErrorMsg")
    assert config.passed.icon == "✓"


async def test_load_config_missing_file(tmp_path: Path) -> None:
    """A missing file is reported as such."""
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        await load_config(tmp_path / "missing.yaml")


async def test_load_config_invalid_yaml(tmp_path: Path) -> None:
    """Unparseable YAML is rejected."""
    path = tmp_path / "config.yaml"
    path.write_text("mode: [unclosed")

    with pytest.raises(ValueError, match="Invalid YAML in"):
        await load_config(path)


async def test_load_config_empty_file(tmp_path: Path) -> None:
    """An empty file is rejected."""
    path = tmp_path / "config.yaml"
    path.write_text("")

    with pytest.raises(ValueError, match="Empty config file"):
        await load_config(path)


@pytest.mark.parametrize(
    "content",
    ["mode: sideways", "poll_interval: 0", "passed: {icon: x}"],
)
async def test_load_config_invalid_schema(tmp_path: Path, content: str) -> None:
    """Values that fail validation are rejected."""
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(ValueError, match="Invalid config schema in"):
        await load_config(path)


def test_style_for_pending_uses_skipped() -> None:
    """Pending tests are drawn with the skipped style."""
    config = WatchConfig()

    assert config.style_for("pending") is config.skipped
    assert config.style_for("failed") is config.failed
    assert config.style_for("loading") is config.loading
