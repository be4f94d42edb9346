"""Docs and npm release tooling for JavaScript libraries."""

__version__ = "2026.10.1"

from .exceptions import (
    PreconditionFailure,
    ProcessFailure,
    ProcessSpawnFailure,
    PromptFailure,
    PublishScriptsError,
    UserDeclined,
)

__all__ = [
    "__version__",
    "PublishScriptsError",
    "PromptFailure",
    "ProcessFailure",
    "ProcessSpawnFailure",
    "PreconditionFailure",
    "UserDeclined",
]
