"""Controllers for mise-runner CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mise_runner.backend import MiseCliBackend, Prompter, TaskBackend
from mise_runner.config import Settings
from mise_runner.prompting import ClickPrompter
from mise_runner.tasks.arguments import ArgumentCollector
from mise_runner.tasks.catalog import TaskCatalog
from mise_runner.tasks.models import TaskGroup
from mise_runner.tasks.runner import RunOutcome, TaskRunner
from mise_runner.tasks.watcher import ChangeWatchDebouncer


@dataclass(slots=True)
class BackendOptions:
    """Where mise lives and which project it should look at."""

    root_dir: Path | None = None
    mise_bin: str | None = None


@dataclass(slots=True)
class RunTaskCommand:
    """CLI input for run and watch."""

    options: BackendOptions
    task_name: str
    watch: bool = False


@dataclass(slots=True)
class ObserveCommand:
    """CLI input for the file-change observe loop."""

    options: BackendOptions
    max_changes: int | None = None


@dataclass(slots=True)
class RunTaskResult:
    """Run/watch report to render in CLI."""

    lines: list[str]
    success: bool


class TaskCliController:
    """Builds the task engine from settings and renders its results as text lines."""

    def __init__(
        self,
        *,
        backend_factory: Callable[[Settings], TaskBackend] | None = None,
        prompter_factory: Callable[[], Prompter] = ClickPrompter,
    ) -> None:
        self._backend_factory = backend_factory or _mise_backend
        self._prompter_factory = prompter_factory

    def list_tasks(self, options: BackendOptions) -> list[str]:
        settings = self._settings(options)
        groups = asyncio.run(TaskCatalog(self._backend_factory(settings)).list())
        if not groups:
            return ["No mise tasks found."]
        return render_task_groups(groups)

    def run_task(self, command: RunTaskCommand) -> RunTaskResult:
        settings = self._settings(command.options)
        runner = TaskRunner(
            backend=self._backend_factory(settings),
            collector=ArgumentCollector(self._prompter_factory()),
            watch_helper=settings.watch_helper,
        )
        entry_point = runner.watch if command.watch else runner.run
        outcome: RunOutcome = asyncio.run(entry_point(command.task_name))
        return RunTaskResult(lines=[outcome.message], success=outcome.ok)

    def list_tools(self, options: BackendOptions) -> list[str]:
        settings = self._settings(options)
        tools = asyncio.run(self._backend_factory(settings).list_installed_tools())
        if not tools:
            return ["No installed tools."]
        return [f"{tool.name} {tool.version}".rstrip() for tool in tools]

    def list_config_files(self, options: BackendOptions) -> list[str]:
        settings = self._settings(options)
        config_files = asyncio.run(self._backend_factory(settings).list_config_files())
        if not config_files:
            return ["No mise config files."]
        return [config_file.path for config_file in config_files]

    def list_env_vars(self, options: BackendOptions) -> list[str]:
        settings = self._settings(options)
        env_vars = asyncio.run(self._backend_factory(settings).list_env_vars())
        if not env_vars:
            return ["No mise environment variables."]
        return [f"{env_var.name}={env_var.value}" for env_var in env_vars]

    def observe(self, command: ObserveCommand, emit: Callable[[str], None]) -> None:
        settings = self._settings(command.options)
        if not settings.enabled:
            emit("Watching is disabled (MISE_RUNNER_ENABLED); change events will be ignored.")
        asyncio.run(self._observe(settings, command.max_changes, emit))

    async def _observe(
        self,
        settings: Settings,
        max_changes: int | None,
        emit: Callable[[str], None],
    ) -> None:
        backend = self._backend_factory(settings)
        catalog = TaskCatalog(backend)
        done = asyncio.Event()
        seen = 0

        async def _on_change(path: str) -> None:
            nonlocal seen
            groups = await catalog.list()
            task_count = sum(len(group.tasks) for group in groups)
            emit(f"Changed: {path}")
            emit(f"Tasks: {task_count} in {len(groups)} source(s)")
            seen += 1
            if max_changes is not None and seen >= max_changes:
                done.set()

        debouncer = ChangeWatchDebouncer(
            backend=backend,
            root_dir=settings.root_dir,
            on_change=_on_change,
            is_enabled=lambda: settings.enabled,
        )
        await debouncer.start()
        emit(f"Watching {settings.root_dir} for mise task changes. Press Ctrl-C to stop.")
        try:
            await done.wait()
        finally:
            debouncer.stop()

    def _settings(self, options: BackendOptions) -> Settings:
        settings = Settings.from_env(root_dir=options.root_dir, mise_bin=options.mise_bin)
        settings.validate()
        return settings


def render_task_groups(groups: list[TaskGroup]) -> list[str]:
    lines: list[str] = []
    for group in groups:
        lines.append(group.source)
        width = max(len(task.name) for task in group.tasks)
        for task in group.tasks:
            lines.append(f"  {task.name:<{width}}  {task.description}".rstrip())
    return lines


def _mise_backend(settings: Settings) -> TaskBackend:
    return MiseCliBackend(mise_bin=settings.mise_bin, root_dir=settings.root_dir)
