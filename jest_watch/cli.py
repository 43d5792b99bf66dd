"""CLI entry point for tracking a Jest test file in watch mode."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from jest_watch.config import load_config
from jest_watch.renderers.manifest import load_renderer_manifest
from jest_watch.session import RunSession
from jest_watch.tracker import WatchTracker

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "pending": "⏭️",
    "loading": "⏳",
}


def log_session_summary(log: logging.Logger, session: RunSession) -> None:
    """Log the final status of every test and suite of a session."""
    log.info("=" * 80)
    log.info("Final statuses for %s:", session.path.name)
    log.info("=" * 80)

    for line, identifier in sorted(session.identifiers.items()):
        symbol = STATUS_SYMBOLS.get(identifier.status, "?")
        indent = "  " * sum(1 for _ in identifier.ancestors())
        log.info(
            "%s %s%s at line %d: %s",
            symbol,
            indent,
            identifier.kind,
            line + 1,
            identifier.status,
        )


async def run(path: Path, config_path: Path | None, renderer_key: str) -> int:
    """Track a test file until its watch process ends and return exit code."""
    log = logging.getLogger("jest_watch")

    config = await load_config(config_path)

    log.info("Loading renderer: %s", renderer_key)
    manifest = load_renderer_manifest(renderer_key)
    renderer = manifest.renderer_factory(config)

    tracker = WatchTracker(config=config, renderer=renderer)
    session = await tracker.start_tracking(path)
    if session is None:
        log.error("Cannot watch %s: no Jest project or unsupported file", path)
        return 1

    try:
        await session.wait_closed()
    finally:
        await tracker.stop_all()

    log_session_summary(log, session)

    return 0 if session.returncode in (0, None) else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run Jest in watch mode and track results per test"
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Test file to watch (.js, .jsx, .ts, .tsx, ...)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--renderer",
        default="console",
        help="Renderer key (console, json-lines)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log marks and Jest's stderr",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = asyncio.run(
            run(
                path=args.path,
                config_path=args.config,
                renderer_key=args.renderer,
            )
        )
    except KeyboardInterrupt:
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
