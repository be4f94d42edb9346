"""Run external commands and keep track of the ones still alive."""

from __future__ import annotations

import asyncio
import logging
import pathlib
import shutil
import signal
from dataclasses import dataclass
from typing import Optional, Sequence, Set

from .exceptions import ProcessFailure, ProcessSpawnFailure

logger = logging.getLogger(__name__)

TERMINATE_TIMEOUT = 5.0


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a successful command. Output is empty unless captured."""

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""


class ProcessRunner:
    """Spawns child processes one at a time and remembers the live ones.

    The set of live children exists only so a shutdown handler can kill them;
    an entry is dropped once its process has been reaped.
    """

    def __init__(self):
        self.live: Set[asyncio.subprocess.Process] = set()

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: Optional[pathlib.Path] = None,
        capture: bool = False,
    ) -> ProcessResult:
        """Run ``command`` and wait for it to exit.

        Args:
            command: Executable name, resolved on PATH
            args: Arguments passed to the executable
            cwd: Working directory for the child
            capture: Collect stdout/stderr instead of inheriting the console

        Raises:
            ProcessSpawnFailure: The executable could not be started
            ProcessFailure: The executable exited with a nonzero status
        """
        display = " ".join([command, *args])
        executable = shutil.which(command) or command
        stream = asyncio.subprocess.PIPE if capture else None

        logger.debug(f"Running {display} (cwd={cwd or pathlib.Path.cwd()})")
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *args,
                cwd=str(cwd) if cwd else None,
                stdout=stream,
                stderr=stream,
            )
        except OSError as exc:
            raise ProcessSpawnFailure(display, exc) from exc

        self.live.add(process)
        try:
            stdout_bytes, stderr_bytes = await process.communicate()
        except asyncio.CancelledError:
            await self._stop(process)
            raise
        finally:
            if process.returncode is not None:
                self.live.discard(process)

        stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""

        if process.returncode != 0:
            raise ProcessFailure(display, process.returncode, stderr or None)
        return ProcessResult(display, process.returncode, stdout, stderr)

    async def terminate_all(self) -> None:
        """Hang up on every live child and wait for it to go away."""
        for process in list(self.live):
            await self._stop(process)

    async def _stop(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            logger.debug(f"Stopping child process {process.pid}")
            try:
                process.send_signal(getattr(signal, "SIGHUP", signal.SIGTERM))
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(process.wait(), TERMINATE_TIMEOUT)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
        self.live.discard(process)
