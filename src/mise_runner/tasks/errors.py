"""Failures reported by argument collection and task invocation."""

from __future__ import annotations

WATCH_HELPER_INSTALL_HINT = "mise use -g {helper}"


class CollectionError(Exception):
    """Argument collection could not produce a usable command line."""


class MissingRequiredArgumentError(CollectionError):
    def __init__(self, argument_name: str) -> None:
        super().__init__(f"Required argument {argument_name} was not provided")
        self.argument_name = argument_name


class RunError(Exception):
    """Base class for run/watch failures surfaced to the user."""


class TaskNotFoundError(RunError):
    def __init__(self, task_name: str) -> None:
        super().__init__(f"Task '{task_name}' not found")
        self.task_name = task_name


class ArgumentCollectionError(RunError):
    def __init__(self, cause: CollectionError) -> None:
        super().__init__(str(cause))
        self.cause = cause


class MissingWatchPrerequisiteError(RunError):
    def __init__(self, helper: str = "watchexec") -> None:
        super().__init__(
            f"{helper} is required to run tasks in watch mode. "
            f"Install it with `{WATCH_HELPER_INSTALL_HINT.format(helper=helper)}`",
        )
        self.helper = helper


class InvocationFailedError(RunError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(str(cause))
        self.cause = cause
