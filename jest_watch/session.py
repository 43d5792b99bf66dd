"""Per-file tracking state and the registry of active sessions."""

import asyncio
import logging
import os
from collections import Counter
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from jest_watch.config import WatchConfig
from jest_watch.extractor import extract_file_identifiers
from jest_watch.frames import FrameAssembler
from jest_watch.locator import DiagnosticLocator
from jest_watch.models.diagnostic import Diagnostic
from jest_watch.models.identifier import Identifier
from jest_watch.models.jest import JestOutput
from jest_watch.reconciler import ResultReconciler
from jest_watch.renderers.base import Renderer
from jest_watch.renderers.marks import build_mark
from jest_watch.supervisor import WatchProcess

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class WatchJob:
    """Everything needed to run Jest in watch mode for one test file."""

    path: Path
    project_root: Path
    command: Sequence[str]


class RunSession:
    """Tracks one test file while its watch process runs.

    All methods are called from the event loop, so state is never touched
    concurrently.
    """

    def __init__(
        self,
        *,
        job: WatchJob,
        config: WatchConfig,
        renderer: Renderer,
        on_teardown: Callable[["RunSession"], None] | None = None,
    ) -> None:
        self.job = job
        self.config = config
        self.renderer = renderer
        self.identifiers: Mapping[int, Identifier] = {}
        self.diagnostics: list[Diagnostic] = []
        self.initialized = False
        self.returncode: int | None = None
        self.process: WatchProcess | None = None
        self.locator = DiagnosticLocator(test_file_name=job.path.name)
        self.assembler = FrameAssembler()
        self._on_teardown = on_teardown
        self._listeners: list[asyncio.Task[None]] = []
        self._source_stamp: int | None = None
        self._closed = asyncio.Event()

    @property
    def path(self) -> Path:
        """The tracked test file."""
        return self.job.path

    @property
    def closed(self) -> bool:
        """Whether the session has been torn down."""
        return self._closed.is_set()

    async def start(self) -> None:
        """Extract the file's tests and start the watch process."""
        self.init_marks()
        self.process = WatchProcess(
            command=self.job.command,
            cwd=self.job.project_root,
            on_output=self.handle_output,
            on_exit=self._handle_exit,
        )
        await self.process.start()

    def add_listener(self, task: "asyncio.Task[None]") -> None:
        """Attach a background task that is cancelled on teardown."""
        self._listeners.append(task)

    def init_marks(self) -> None:
        """Re-extract identifiers and draw their initial statuses."""
        self.initialized = True
        self.renderer.clear(self.path)
        self.diagnostics = []

        try:
            self._source_stamp = self.path.stat().st_mtime_ns
            source = self.path.read_bytes()
        except OSError as e:
            log.warning("Cannot read %s: %s", self.path, e)
            self.identifiers = {}
            return

        self.identifiers = extract_file_identifiers(self.path, source)
        for identifier in self.identifiers.values():
            self.render(identifier)

    def source_changed(self) -> bool:
        """Whether the file was written since identifiers were extracted."""
        try:
            stamp = self.path.stat().st_mtime_ns
        except OSError:
            return False
        return stamp != self._source_stamp

    def on_save(self) -> None:
        """Reset statuses before Jest reports the run triggered by a save."""
        log.info("%s saved, waiting for results", self.path.name)
        self.init_marks()

    def handle_output(self, line: str) -> None:
        """Consume one line of watch stdout."""
        for payload in self.assembler.feed(line):
            try:
                output = JestOutput.model_validate(payload)
            except ValidationError as e:
                log.warning("Ignoring malformed Jest results: %s", e)
                continue
            self.handle_results(output)

    def handle_results(self, output: JestOutput) -> None:
        """Apply one run's results to the identifiers and publish them."""
        # a run triggered by another file arrives without a save here
        if not self.initialized or self.source_changed():
            self.init_marks()
        self.initialized = False

        reconciler = ResultReconciler(
            identifiers=self.identifiers,
            locator=self.locator,
            on_update=self.render,
        )
        self.diagnostics = list(reconciler.reconcile(output.test_results))
        self.renderer.set_diagnostics(self.path, self.diagnostics)

        counts = Counter(identifier.status for identifier in self.identifiers.values())
        log.info(
            "Run finished for %s: %d passed, %d failed, %d skipped",
            self.path.name,
            counts["passed"],
            counts["failed"],
            counts["pending"],
        )

    def render(self, identifier: Identifier) -> None:
        """Draw or update the mark of an identifier."""
        identifier.render_handle = self.renderer.update_mark(
            self.path, build_mark(identifier, self.config), identifier.render_handle
        )

    def request_run(self) -> bool:
        """Touch the tracked file so Jest's file watcher runs it again.

        Jest only reads watch-mode keys from a terminal, so a run cannot be
        requested over stdin.
        """
        if self.process is None or not self.process.running:
            return False
        try:
            os.utime(self.path)
        except OSError as e:
            log.warning("Cannot touch %s: %s", self.path, e)
            return False
        self.on_save()
        return True

    async def stop(self) -> None:
        """Kill the watch process and tear the session down."""
        if self.process is not None:
            await self.process.stop()
        self.teardown()

    async def wait_closed(self) -> None:
        """Wait until the session has been torn down."""
        await self._closed.wait()

    def teardown(self) -> None:
        """Clear marks, diagnostics and listeners; safe to call repeatedly."""
        if self._closed.is_set():
            return
        self._closed.set()

        current = asyncio.current_task()
        for task in self._listeners:
            if task is not current:
                task.cancel()
        self._listeners.clear()

        self.diagnostics = []
        if self.assembler.pending:
            log.debug("Dropping partial results for %s", self.path.name)
        self.assembler.reset()
        self.renderer.clear(self.path)
        if self._on_teardown is not None:
            self._on_teardown(self)
        log.info("Stopped tracking %s", self.path)

    def _handle_exit(self, returncode: int | None) -> None:
        self.returncode = returncode
        self.teardown()


class SessionRegistry:
    """Active sessions keyed by resolved file path."""

    def __init__(self) -> None:
        self._sessions: dict[Path, RunSession] = {}

    def get(self, path: Path) -> RunSession | None:
        """Return the session tracking a file, if any."""
        return self._sessions.get(path.resolve())

    def set(self, path: Path, session: RunSession) -> None:
        """Register the session tracking a file."""
        self._sessions[path.resolve()] = session

    def remove(self, path: Path) -> RunSession | None:
        """Forget the session of a file and return it."""
        return self._sessions.pop(path.resolve(), None)

    def __contains__(self, path: Path) -> bool:
        return path.resolve() in self._sessions

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._sessions))

    def __len__(self) -> int:
        return len(self._sessions)
