"""Shutdown bookkeeping owned by the CLI entry point."""

from __future__ import annotations

import enum
import inspect
import logging
from typing import Any, Callable, List, Optional

from .constants import EXIT_INTERRUPTED, EXIT_UNCAUGHT

logger = logging.getLogger(__name__)

ShutdownCallback = Callable[[], Any]


class ShutdownCause(enum.Enum):
    NORMAL = "normal"
    INTERRUPT = "interrupt"
    UNCAUGHT = "uncaught"


class ExitLifecycle:
    """Runs cleanup callbacks once, whatever ended the run.

    Callbacks may be plain functions or coroutine functions; they run in
    registration order and each is awaited before the next starts.
    """

    def __init__(self):
        self._callbacks: List[ShutdownCallback] = []
        self._exit_code: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self._exit_code is not None

    def on_shutdown(self, callback: ShutdownCallback) -> None:
        self._callbacks.append(callback)

    async def shutdown(self, cause: ShutdownCause, exit_code: int = 0) -> int:
        """Run every callback and return the process exit code.

        Only the first call runs callbacks; later calls return the code the
        first one settled on.
        """
        if self._exit_code is not None:
            return self._exit_code

        if cause is ShutdownCause.INTERRUPT:
            exit_code = EXIT_INTERRUPTED
        elif cause is ShutdownCause.UNCAUGHT:
            exit_code = EXIT_UNCAUGHT
        self._exit_code = exit_code

        for callback in self._callbacks:
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(f"Cleanup step failed: {exc}")
        return exit_code
