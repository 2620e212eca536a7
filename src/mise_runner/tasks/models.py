"""Domain models for mise tasks and their usage specs."""

from __future__ import annotations

from dataclasses import dataclass, field

UNKNOWN_SOURCE = "Unknown"


@dataclass(frozen=True, slots=True)
class Task:
    """One task record as reported by `mise tasks ls`."""

    name: str
    source: str = UNKNOWN_SOURCE
    description: str = ""


@dataclass(frozen=True, slots=True)
class TaskGroup:
    """Tasks sharing the same declaring source."""

    source: str
    tasks: tuple[Task, ...]


@dataclass(frozen=True, slots=True)
class PositionalArg:
    name: str
    required: bool = False


@dataclass(frozen=True, slots=True)
class FlagArg:
    """A flag; `arg` is the value placeholder, `None` for boolean switches."""

    name: str
    arg: str | None = None

    @property
    def takes_value(self) -> bool:
        return self.arg is not None


@dataclass(frozen=True, slots=True)
class UsageSpec:
    """Declared positional arguments and flags of a task."""

    args: tuple[PositionalArg, ...] = ()
    flags: tuple[FlagArg, ...] = ()

    @property
    def needs_arguments(self) -> bool:
        return bool(self.args) or bool(self.flags)


@dataclass(frozen=True, slots=True)
class TaskInfo:
    """Per-task details from `mise tasks info`."""

    name: str
    usage_spec: UsageSpec = field(default_factory=UsageSpec)


@dataclass(frozen=True, slots=True)
class InstalledTool:
    name: str
    version: str = ""


@dataclass(frozen=True, slots=True)
class ConfigFile:
    path: str


@dataclass(frozen=True, slots=True)
class EnvVar:
    """One variable from the environment mise would set for the project."""

    name: str
    value: str
