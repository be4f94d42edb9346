"""Errors raised by the release and docs pipelines."""

from __future__ import annotations

from typing import Optional


class PublishScriptsError(Exception):
    """Base class for every failure that should end a pipeline."""


class PromptFailure(PublishScriptsError):
    """The interactive prompt could not be shown or answered."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Unable to prompt for input: {cause}")


class ProcessFailure(PublishScriptsError):
    """A child process exited with a nonzero status."""

    def __init__(self, command: str, exit_code: int, stderr: Optional[str] = None):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"'{command}' exited with code {exit_code}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class ProcessSpawnFailure(PublishScriptsError):
    """A child process could not be started at all."""

    def __init__(self, command: str, cause: BaseException):
        self.command = command
        self.cause = cause
        super().__init__(f"Unable to run '{command}': {cause}")


class PreconditionFailure(PublishScriptsError):
    """The project is not in a state the command can start from."""


class UserDeclined(PublishScriptsError):
    """The operator answered no to a confirmation. Never logged as an error."""


class OperatorInterrupt(Exception):
    """Ctrl-C was pressed while a prompt was waiting for input."""
