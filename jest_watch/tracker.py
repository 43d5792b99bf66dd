"""Start and stop tracking of test files."""

import asyncio
import logging
import shlex
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from jest_watch.config import WatchConfig
from jest_watch.renderers.base import Renderer
from jest_watch.session import RunSession, SessionRegistry, WatchJob
from jest_watch.syntax.query import SUFFIX_TO_LANGUAGE

log = logging.getLogger(__name__)


def find_project_root(path: Path, markers: Sequence[str]) -> Path | None:
    """Return the nearest ancestor of ``path`` holding one of ``markers``."""
    for directory in path.resolve().parents:
        if any((directory / marker).exists() for marker in markers):
            return directory
    return None


def resolve_jest_command(project_root: Path, config: WatchConfig) -> Sequence[str]:
    """Return the command that starts Jest for a project.

    Prefers the configured command, then the project's own jest binary, then
    ``npx jest``.
    """
    if config.jest_command is not None:
        return shlex.split(config.jest_command)

    local_jest = project_root / "node_modules" / ".bin" / "jest"
    if local_jest.exists():
        return [str(local_jest)]
    return ["npx", "jest"]


def resolve_job(path: Path, config: WatchConfig) -> WatchJob | None:
    """Work out how to watch a test file, or ``None`` when it cannot be."""
    path = path.resolve()
    if path.suffix.lower() not in SUFFIX_TO_LANGUAGE:
        log.info("Not a JavaScript/TypeScript test file: %s", path)
        return None

    project_root = find_project_root(path, config.root_markers)
    if project_root is None:
        log.info("No project root found for %s", path)
        return None

    command = resolve_jest_command(project_root, config)
    if not command:
        log.info("No Jest command for %s", project_root)
        return None

    return WatchJob(
        path=path,
        project_root=project_root,
        command=[*command, *config.jest_args, str(path)],
    )


@dataclass(kw_only=True)
class WatchTracker:
    """Control surface for the host: one session per tracked file."""

    config: WatchConfig
    renderer: Renderer
    registry: SessionRegistry = field(default_factory=SessionRegistry)

    async def start_tracking(self, path: Path) -> RunSession | None:
        """Start watching a test file; returns the existing session if any.

        Returns ``None`` when the file cannot be watched (no project root,
        no Jest command, unsupported file type).
        """
        if (session := self.registry.get(path)) is not None:
            log.debug("Already tracking %s", path)
            return session

        job = resolve_job(path, self.config)
        if job is None:
            return None

        session = RunSession(
            job=job,
            config=self.config,
            renderer=self.renderer,
            on_teardown=self._forget,
        )
        self.registry.set(job.path, session)
        log.info("Tracking %s", job.path)

        try:
            await session.start()
        except OSError:
            log.exception("Failed to start Jest for %s", job.path)
            session.teardown()
            return None

        session.add_listener(asyncio.create_task(self._poll_saves(session)))
        return session

    async def stop_tracking(self, path: Path) -> None:
        """Stop watching a test file; does nothing if it is not tracked."""
        if (session := self.registry.get(path)) is None:
            return
        await session.stop()

    async def file_saved(self, path: Path) -> None:
        """Host hook: a tracked file was written."""
        if (session := self.registry.get(path)) is not None:
            session.on_save()

    async def file_closed(self, path: Path) -> None:
        """Host hook: a tracked file was closed."""
        await self.stop_tracking(path)

    async def rerun(self, path: Path) -> bool:
        """Host hook: ask Jest to run a tracked file's tests again."""
        if (session := self.registry.get(path)) is None:
            return False
        return session.request_run()

    async def stop_all(self) -> None:
        """Stop every tracked file."""
        for path in self.registry:
            await self.stop_tracking(path)

    async def _poll_saves(self, session: RunSession) -> None:
        """Detect writes to the tracked file by polling its mtime."""
        while not session.closed:
            await asyncio.sleep(self.config.poll_interval)
            if session.source_changed():
                session.on_save()

    def _forget(self, session: RunSession) -> None:
        if self.registry.get(session.path) is session:
            self.registry.remove(session.path)
