"""Own the Jest watch subprocess of a tracked file."""

import asyncio
import codecs
import contextlib
import logging
import os
import shlex
import signal
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)


async def read_lines(
    stream: asyncio.StreamReader,
    callback: Callable[[str], None],
    chunk_size: int = 65536,
) -> None:
    """Read a stream in chunks and call ``callback`` once per line.

    Lines are not limited in length; a final unterminated line is delivered
    at end of stream.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while chunk := await stream.read(chunk_size):
        pending += decoder.decode(chunk)
        *lines, pending = pending.split("\n")
        for line in lines:
            callback(line.rstrip("\r"))
    pending += decoder.decode(b"", final=True)
    if pending:
        callback(pending.rstrip("\r"))


@dataclass(kw_only=True)
class WatchProcess:
    """A single watch-mode subprocess.

    ``on_output`` receives stdout line by line; ``on_exit`` is called with the
    return code once the process has exited and its output is drained,
    whether it crashed, finished or was stopped.
    """

    command: Sequence[str]
    cwd: Path
    on_output: Callable[[str], None]
    on_exit: Callable[[int | None], None]
    _process: asyncio.subprocess.Process | None = field(default=None, init=False)
    _waiter: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def running(self) -> bool:
        """Whether the subprocess is alive."""
        return self._process is not None

    async def start(self) -> None:
        """Spawn the subprocess; does nothing if one is already running."""
        if self._process is not None:
            log.debug("Watch process already running (pid=%s)", self._process.pid)
            return

        log.info("Starting: %s (cwd=%s)", shlex.join(self.command), self.cwd)
        process = await asyncio.create_subprocess_exec(
            *self.command,
            cwd=self.cwd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        self._process = process
        self._waiter = asyncio.create_task(self._watch(process))

    async def stop(self) -> None:
        """Kill the subprocess immediately and wait for exit handling."""
        process, self._process = self._process, None
        if process is None:
            return

        log.info("Stopping watch process (pid=%s)", process.pid)
        _kill(process)
        if self._waiter is not None and self._waiter is not asyncio.current_task():
            await self._waiter

    async def _watch(self, process: asyncio.subprocess.Process) -> None:
        assert process.stdout is not None
        assert process.stderr is not None
        await asyncio.gather(
            read_lines(process.stdout, self.on_output),
            read_lines(process.stderr, self._log_stderr),
        )
        returncode = await process.wait()
        if self._process is process:
            self._process = None

        log.info("Watch process exited with code %s", returncode)
        self.on_exit(returncode)

    @staticmethod
    def _log_stderr(line: str) -> None:
        if line.strip():
            log.debug("jest: %s", line)


def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill the process and everything it spawned (``npx`` forks node)."""
    with contextlib.suppress(ProcessLookupError, PermissionError):
        if sys.platform != "win32":
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
