"""Run and watch entry points with argument collection and watch guard."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from mise_runner.backend.base import BackendCommandError, TaskBackend
from mise_runner.tasks.arguments import ArgumentCollector
from mise_runner.tasks.errors import (
    ArgumentCollectionError,
    CollectionError,
    InvocationFailedError,
    MissingWatchPrerequisiteError,
    RunError,
    TaskNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_WATCH_HELPER = "watchexec"


class RunMode(str, Enum):
    RUN = "run"
    WATCH = "watch"


@dataclass(slots=True)
class RunOutcome:
    """Result of one run/watch request, ready to show to the user."""

    task_name: str
    mode: RunMode
    arguments: list[str] = field(default_factory=list)
    error: RunError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        if self.error is None:
            return f"Task '{self.task_name}' finished ({self.mode.value})."
        if isinstance(self.error, MissingWatchPrerequisiteError):
            return str(self.error)
        return f"Failed to run task '{self.task_name}': {self.error}"


class TaskRunner:
    """Resolves a task, collects its arguments when needed, and invokes the backend."""

    def __init__(
        self,
        *,
        backend: TaskBackend,
        collector: ArgumentCollector,
        watch_helper: str = DEFAULT_WATCH_HELPER,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.backend = backend
        self.collector = collector
        self.watch_helper = watch_helper
        self._which = which

    async def run(self, task_name: str) -> RunOutcome:
        return await self._execute(task_name, RunMode.RUN, self.backend.run_task)

    async def watch(self, task_name: str) -> RunOutcome:
        if not await self.watch_helper_available():
            outcome = RunOutcome(
                task_name=task_name,
                mode=RunMode.WATCH,
                error=MissingWatchPrerequisiteError(self.watch_helper),
            )
            logger.info("%s", outcome.message)
            return outcome
        return await self._execute(task_name, RunMode.WATCH, self.backend.watch_task)

    async def watch_helper_available(self) -> bool:
        """Check the installed-tool listing and PATH; a failed probe counts as absent."""

        tools_result, path_result = await asyncio.gather(
            self.backend.list_installed_tools(),
            asyncio.to_thread(self._which, self.watch_helper),
            return_exceptions=True,
        )
        if isinstance(tools_result, BaseException):
            logger.debug("Installed tool listing failed: %s", tools_result)
            from_tools = False
        else:
            from_tools = any(tool.name == self.watch_helper for tool in tools_result)
        if isinstance(path_result, BaseException):
            logger.debug("Executable lookup for %s failed: %s", self.watch_helper, path_result)
            from_path = False
        else:
            from_path = bool(path_result)
        return from_tools or from_path

    async def _execute(
        self,
        task_name: str,
        mode: RunMode,
        invoke: Callable[[str, Sequence[str]], Awaitable[None]],
    ) -> RunOutcome:
        outcome = RunOutcome(task_name=task_name, mode=mode)
        try:
            outcome.arguments = await self._resolve_arguments(task_name)
            logger.debug("Invoking %s for task %s with %s", mode.value, task_name, outcome.arguments)
            await invoke(task_name, outcome.arguments)
        except RunError as error:
            outcome.error = error
        except BackendCommandError as error:
            outcome.error = InvocationFailedError(error)
        if outcome.error is not None:
            logger.info("%s", outcome.message)
        return outcome

    async def _resolve_arguments(self, task_name: str) -> list[str]:
        info = await self.backend.get_task_info(task_name)
        if info is None:
            raise TaskNotFoundError(task_name)
        if not info.usage_spec.needs_arguments:
            return []
        try:
            return await self.collector.collect(info.usage_spec)
        except CollectionError as error:
            raise ArgumentCollectionError(error) from error
