"""Task backend ports and implementations."""

from mise_runner.backend.base import BackendCommandError, Prompter, TaskBackend
from mise_runner.backend.mise_cli import MiseCliBackend

__all__ = [
    "BackendCommandError",
    "MiseCliBackend",
    "Prompter",
    "TaskBackend",
]
