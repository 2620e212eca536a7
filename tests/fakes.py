"""In-memory collaborators for task engine tests."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from mise_runner.backend.base import BackendCommandError
from mise_runner.tasks.models import ConfigFile, EnvVar, InstalledTool, Task, TaskInfo


@dataclass(slots=True)
class FakeBackend:
    """TaskBackend double that records every invocation."""

    tasks: list[Task] = field(default_factory=list)
    infos: dict[str, TaskInfo] = field(default_factory=dict)
    tools: list[InstalledTool] = field(default_factory=list)
    config_files: list[ConfigFile] = field(default_factory=list)
    env_vars: list[EnvVar] = field(default_factory=list)
    probe_output: str = "build  Build the project"
    tools_error: Exception | None = None
    config_files_error: Exception | None = None
    probe_error: Exception | None = None
    invoke_error: Exception | None = None
    runs: list[tuple[str, list[str]]] = field(default_factory=list)
    watches: list[tuple[str, list[str]]] = field(default_factory=list)
    probe_calls: int = 0

    async def list_tasks(self) -> list[Task]:
        return list(self.tasks)

    async def get_task_info(self, name: str) -> TaskInfo | None:
        return self.infos.get(name)

    async def list_installed_tools(self) -> list[InstalledTool]:
        if self.tools_error is not None:
            raise self.tools_error
        return list(self.tools)

    async def run_task(self, name: str, args: Sequence[str]) -> None:
        if self.invoke_error is not None:
            raise self.invoke_error
        self.runs.append((name, list(args)))

    async def watch_task(self, name: str, args: Sequence[str]) -> None:
        if self.invoke_error is not None:
            raise self.invoke_error
        self.watches.append((name, list(args)))

    async def list_config_files(self) -> list[ConfigFile]:
        if self.config_files_error is not None:
            raise self.config_files_error
        return list(self.config_files)

    async def list_env_vars(self) -> list[EnvVar]:
        return list(self.env_vars)

    async def probe(self) -> str:
        self.probe_calls += 1
        if self.probe_error is not None:
            raise self.probe_error
        return self.probe_output


class ScriptedPrompter:
    """Prompter double answering from a fixed script, in order."""

    def __init__(self, answers: Sequence[str | bool | None] = ()) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    async def ask_text(self, prompt_label: str, placeholder: str, required: bool) -> str | None:
        self.questions.append(prompt_label)
        return self._next()  # type: ignore[return-value]

    async def ask_yes_no(self, prompt_label: str) -> bool | None:
        self.questions.append(prompt_label)
        return self._next()  # type: ignore[return-value]

    def _next(self) -> str | bool | None:
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {self.questions[-1]!r}")
        return self.answers.pop(0)


def probe_failure() -> BackendCommandError:
    return BackendCommandError("`mise tasks ls` exited with code 1: boom", exit_code=1)


def set_fake_mise_data(monkeypatch, **payloads: object) -> None:
    """Expose JSON payloads to the fake mise, e.g. `tasks=[...]`, `infos={...}`."""

    for key, value in payloads.items():
        monkeypatch.setenv(f"FAKE_MISE_{key.upper()}", json.dumps(value))


def read_fake_mise_calls(tmp_path: Path) -> list[list[str]]:
    log_path = tmp_path / "mise-calls.log"
    if not log_path.exists():
        return []
    return [json.loads(line) for line in log_path.read_text("utf-8").splitlines() if line]
