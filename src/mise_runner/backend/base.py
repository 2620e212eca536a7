"""Ports consumed by the task engine."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from mise_runner.tasks.models import ConfigFile, EnvVar, InstalledTool, Task, TaskInfo


class BackendCommandError(RuntimeError):
    """A backend command failed to start, exited non-zero, or returned garbage."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class TaskBackend(Protocol):
    """Protocol implemented by task-runner backends."""

    async def list_tasks(self) -> list[Task]:
        """Return every task the backend knows about."""

    async def get_task_info(self, name: str) -> TaskInfo | None:
        """Return task details, or `None` when no task has this exact name."""

    async def list_installed_tools(self) -> list[InstalledTool]: ...

    async def run_task(self, name: str, args: Sequence[str]) -> None: ...

    async def watch_task(self, name: str, args: Sequence[str]) -> None: ...

    async def list_config_files(self) -> list[ConfigFile]: ...

    async def list_env_vars(self) -> list[EnvVar]: ...

    async def probe(self) -> str:
        """Cheap health check; returns the command output."""


class Prompter(Protocol):
    """Interactive question asker. `None` means the user cancelled."""

    async def ask_text(self, prompt_label: str, placeholder: str, required: bool) -> str | None: ...

    async def ask_yes_no(self, prompt_label: str) -> bool | None: ...
