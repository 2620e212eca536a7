"""Subprocess-based backend that talks to the `mise` executable."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

from mise_runner.backend.base import BackendCommandError
from mise_runner.tasks.models import (
    UNKNOWN_SOURCE,
    ConfigFile,
    EnvVar,
    FlagArg,
    InstalledTool,
    PositionalArg,
    Task,
    TaskInfo,
    UsageSpec,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("not found", "no task named")

_T = TypeVar("_T")


class MiseCliBackend:
    """Run `mise` subcommands in a project directory.

    Listing commands capture JSON output; `run_task` and `watch_task` inherit the
    terminal so the task output streams straight to the user.
    """

    def __init__(
        self,
        *,
        mise_bin: str = "mise",
        root_dir: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.mise_bin = mise_bin
        self.root_dir = root_dir
        self.env = env

    async def list_tasks(self) -> list[Task]:
        return await self._capture_parsed(
            lambda payload: [parse_task(entry) for entry in _expect_list(payload, "tasks ls")],
            "tasks",
            "ls",
            "--json",
        )

    async def get_task_info(self, name: str) -> TaskInfo | None:
        try:
            payload = await self._capture_json("tasks", "info", name, "--json")
        except BackendCommandError as error:
            if error.exit_code is not None and _looks_like_not_found(str(error)):
                logger.debug("mise reports no task named %s", name)
                return None
            raise
        if not isinstance(payload, dict):
            raise BackendCommandError(f"Unexpected `mise tasks info` output for {name!r}.")
        return self._parse(
            lambda data: parse_task_info(data, fallback_name=name),
            payload,
            ("tasks", "info", name, "--json"),
        )

    async def list_installed_tools(self) -> list[InstalledTool]:
        return await self._capture_parsed(parse_installed_tools, "ls", "--installed", "--json")

    async def list_config_files(self) -> list[ConfigFile]:
        return await self._capture_parsed(parse_config_files, "config", "ls", "--json")

    async def list_env_vars(self) -> list[EnvVar]:
        return await self._capture_parsed(parse_env_vars, "env", "--json")

    async def run_task(self, name: str, args: Sequence[str]) -> None:
        await self._run_attached("run", name, *args)

    async def watch_task(self, name: str, args: Sequence[str]) -> None:
        await self._run_attached("watch", name, *args)

    async def probe(self) -> str:
        return await self._capture("tasks", "ls")

    async def _capture_parsed(self, parse: Callable[[Any], _T], *args: str) -> _T:
        return self._parse(parse, await self._capture_json(*args), args)

    def _parse(self, parse: Callable[[Any], _T], payload: Any, args: Sequence[str]) -> _T:
        try:
            return parse(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as error:
            raise BackendCommandError(
                f"Unexpected `{self._describe(args)}` output: {error!r}",
            ) from error

    async def _capture_json(self, *args: str) -> Any:
        output = await self._capture(*args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as error:
            raise BackendCommandError(
                f"`{self._describe(args)}` returned invalid JSON: {error}",
            ) from error

    async def _capture(self, *args: str) -> str:
        process = await self._spawn(
            args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise BackendCommandError(
                f"`{self._describe(args)}` exited with code {process.returncode}: "
                f"{_truncate(stderr.decode('utf-8', errors='replace'))}",
                exit_code=process.returncode,
            )
        return stdout.decode("utf-8", errors="replace")

    async def _run_attached(self, *args: str) -> None:
        process = await self._spawn(args)
        returncode = await process.wait()
        if returncode != 0:
            raise BackendCommandError(
                f"`{self._describe(args)}` exited with code {returncode}",
                exit_code=returncode,
            )

    async def _spawn(self, args: Sequence[str], **kwargs: Any) -> asyncio.subprocess.Process:
        logger.debug("Running %s", self._describe(args))
        env = None if self.env is None else {**os.environ, **self.env}
        try:
            return await asyncio.create_subprocess_exec(
                self.mise_bin,
                *args,
                cwd=self.root_dir,
                env=env,
                **kwargs,
            )
        except FileNotFoundError as error:
            raise BackendCommandError(f"mise executable not found: {self.mise_bin}") from error
        except OSError as error:
            raise BackendCommandError(f"mise failed to start: {error}") from error

    def _describe(self, args: Sequence[str]) -> str:
        return " ".join(["mise", *args])


def parse_task(entry: dict[str, Any]) -> Task:
    return Task(
        name=str(entry["name"]),
        source=str(entry.get("source") or UNKNOWN_SOURCE),
        description=str(entry.get("description") or ""),
    )


def parse_task_info(payload: dict[str, Any], *, fallback_name: str) -> TaskInfo:
    return TaskInfo(
        name=str(payload.get("name") or fallback_name),
        usage_spec=parse_usage_spec(payload.get("usage_spec")),
    )


def parse_usage_spec(raw: Any) -> UsageSpec:
    """Read positional args and flags from mise's `usage_spec.cmd` block."""

    if not isinstance(raw, dict):
        return UsageSpec()
    cmd = raw.get("cmd") or {}
    args = tuple(
        PositionalArg(name=str(entry["name"]), required=bool(entry.get("required", False)))
        for entry in cmd.get("args") or []
        if not entry.get("hide")
    )
    flags = tuple(_parse_flag(entry) for entry in cmd.get("flags") or [] if not entry.get("hide"))
    return UsageSpec(args=args, flags=flags)


def parse_installed_tools(payload: Any) -> list[InstalledTool]:
    if not isinstance(payload, dict):
        raise BackendCommandError("Unexpected `mise ls` output: expected an object keyed by tool.")
    tools: list[InstalledTool] = []
    for name, versions in payload.items():
        entries = versions if isinstance(versions, list) else []
        version = ""
        if entries and isinstance(entries[0], dict):
            version = str(entries[0].get("version") or "")
        tools.append(InstalledTool(name=str(name), version=version))
    return tools


def parse_config_files(payload: Any) -> list[ConfigFile]:
    return [
        ConfigFile(path=str(entry["path"]))
        for entry in _expect_list(payload, "config ls")
        if isinstance(entry, dict) and entry.get("path")
    ]


def parse_env_vars(payload: Any) -> list[EnvVar]:
    """`mise env --json` prints one flat object of variable name to value."""

    if not isinstance(payload, dict):
        raise BackendCommandError("Unexpected `mise env` output: expected an object.")
    return [EnvVar(name=str(name), value=str(value)) for name, value in payload.items()]


def _parse_flag(entry: dict[str, Any]) -> FlagArg:
    long_names = entry.get("long") or []
    short_names = entry.get("short") or []
    if long_names:
        name = f"--{long_names[0]}"
    elif short_names:
        name = f"-{short_names[0]}"
    else:
        name = f"--{entry['name']}"

    arg = entry.get("arg")
    placeholder: str | None = None
    if isinstance(arg, dict):
        placeholder = str(arg.get("usage") or arg.get("name") or "value")
    return FlagArg(name=name, arg=placeholder)


def _expect_list(payload: Any, command: str) -> list[Any]:
    if not isinstance(payload, list):
        raise BackendCommandError(f"Unexpected `mise {command}` output: expected a list.")
    return payload


def _looks_like_not_found(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _NOT_FOUND_MARKERS)


def _truncate(value: str, *, limit: int = 240) -> str:
    compact = value.strip().replace("\n", " ")
    if len(compact) <= limit:
        return compact
    return compact[:limit] + "..."
