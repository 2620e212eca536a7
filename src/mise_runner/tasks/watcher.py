"""Filesystem watches that re-check mise when task or config files change."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from mise_runner.backend.base import BackendCommandError, TaskBackend
from mise_runner.tasks.patterns import (
    IDIOMATIC_FILE_PATTERNS,
    MISE_CONFIG_PATTERNS,
    TASK_DIRECTORY_PATTERNS,
    matches_any,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], Awaitable[None] | None]

_RELEVANT_EVENT_TYPES = frozenset({"created", "modified", "deleted", "moved"})


@dataclass(frozen=True, slots=True)
class WatchTarget:
    """One directory watch and the filter applied to its events."""

    label: str
    directory: Path
    recursive: bool
    matches: Callable[[Path], bool]


class _FilteredEventHandler(FileSystemEventHandler):
    def __init__(self, target: WatchTarget, on_path: Callable[[str], None]) -> None:
        super().__init__()
        self.target = target
        self.on_path = on_path

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _RELEVANT_EVENT_TYPES:
            return
        # Directory mtime changes are echoes of child events.
        if event.is_directory and event.event_type == "modified":
            return
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)
        for raw_path in paths:
            path = os.fsdecode(raw_path)
            if self.target.matches(Path(path)):
                self.on_path(path)


class ChangeWatchDebouncer:
    """Probes mise on every relevant file change and forwards the path to a callback.

    Events are not coalesced: each one triggers its own probe-then-callback cycle.
    Events arrive on the watchdog observer thread and are handed to the event loop
    that called `start()`.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        backend: TaskBackend,
        root_dir: Path,
        on_change: ChangeCallback,
        is_enabled: Callable[[], bool] = lambda: True,
        config_patterns: tuple[str, ...] = MISE_CONFIG_PATTERNS,
        idiomatic_patterns: tuple[str, ...] = IDIOMATIC_FILE_PATTERNS,
        task_dir_patterns: tuple[str, ...] = TASK_DIRECTORY_PATTERNS,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self.backend = backend
        self.root_dir = root_dir.resolve()
        self.on_change = on_change
        self.is_enabled = is_enabled
        self.config_patterns = config_patterns
        self.idiomatic_patterns = idiomatic_patterns
        self.task_dir_patterns = task_dir_patterns
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watches: list[ObservedWatch] = []
        self.targets: list[WatchTarget] = []

    @property
    def active_watches(self) -> tuple[ObservedWatch, ...]:
        return tuple(self._watches)

    async def start(self) -> None:
        if self._observer is not None:
            return
        self._loop = asyncio.get_running_loop()
        self.targets = await self._build_targets()

        observer = self._observer_factory()
        try:
            for target in self.targets:
                handler = _FilteredEventHandler(target, self._dispatch)
                self._watches.append(
                    observer.schedule(handler, str(target.directory), recursive=target.recursive),
                )
            observer.start()
        except Exception:
            # e.g. the inotify watch limit; leave nothing half registered
            self._watches.clear()
            observer.unschedule_all()
            if observer.is_alive():
                observer.stop()
                observer.join()
            raise
        self._observer = observer
        logger.info("Watching %d target(s) under %s", len(self.targets), self.root_dir)

    def stop(self) -> None:
        observer = self._observer
        if observer is None:
            return
        self._observer = None
        observer.unschedule_all()
        observer.stop()
        observer.join()
        self._watches.clear()
        logger.info("Stopped watching %s", self.root_dir)

    async def handle_change(self, path: str) -> None:
        """Run one probe-then-callback cycle for a changed path."""

        if not self.is_enabled():
            return

        try:
            output = await self.backend.probe()
        except BackendCommandError as error:
            logger.info("Error while handling file change %s: %s", path, error)
            return

        if output:
            result = self.on_change(path)
            if inspect.isawaitable(result):
                await result

    async def _build_targets(self) -> list[WatchTarget]:
        targets = [
            WatchTarget(
                label="mise config",
                directory=self.root_dir,
                recursive=True,
                matches=self._root_matcher(self.config_patterns),
            ),
        ]

        try:
            config_files = await self.backend.list_config_files()
        except BackendCommandError as error:
            logger.warning("Unable to list mise config files, skipping per-file watches: %s", error)
            config_files = []
        for config_file in config_files:
            config_path = Path(config_file.path).expanduser().resolve()
            if not config_path.parent.is_dir():
                logger.debug("Skipping watch for missing config directory %s", config_path.parent)
                continue
            targets.append(
                WatchTarget(
                    label=f"config file {config_path}",
                    directory=config_path.parent,
                    recursive=False,
                    matches=_exact_matcher(config_path),
                ),
            )

        targets.append(
            WatchTarget(
                label="idiomatic files",
                directory=self.root_dir,
                recursive=True,
                matches=self._root_matcher(self.idiomatic_patterns),
            ),
        )
        targets.append(
            WatchTarget(
                label="task directories",
                directory=self.root_dir,
                recursive=True,
                matches=self._root_matcher(self.task_dir_patterns),
            ),
        )
        return targets

    def _root_matcher(self, patterns: tuple[str, ...]) -> Callable[[Path], bool]:
        root = self.root_dir

        def _matches(path: Path) -> bool:
            try:
                relative = path.resolve().relative_to(root)
            except ValueError:
                return False
            return matches_any(relative.as_posix(), patterns)

        return _matches

    def _dispatch(self, path: str) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or self._observer is None:
            return
        future = asyncio.run_coroutine_threadsafe(self.handle_change(path), loop)
        future.add_done_callback(_log_callback_failure)


def _exact_matcher(expected: Path) -> Callable[[Path], bool]:
    def _matches(path: Path) -> bool:
        return path.resolve() == expected

    return _matches


def _log_callback_failure(future: Future[None]) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("File change callback failed", exc_info=error)
