"""Runtime configuration for the mise task runner."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

ENABLED_ENV = "MISE_RUNNER_ENABLED"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(slots=True)
class Settings:
    """Application settings resolved from the environment."""

    mise_bin: str = "mise"
    root_dir: Path = field(default_factory=Path.cwd)
    enabled: bool = True
    watch_helper: str = "watchexec"
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        *,
        root_dir: Path | None = None,
        mise_bin: str | None = None,
    ) -> Settings:
        """Load settings from environment; explicit arguments win over env vars."""

        env_root = os.getenv("MISE_RUNNER_ROOT", "").strip()
        return cls(
            mise_bin=mise_bin or os.getenv("MISE_RUNNER_MISE_BIN", "mise").strip(),
            root_dir=root_dir or (Path(env_root).expanduser() if env_root else Path.cwd()),
            enabled=_env_bool(ENABLED_ENV, default=True),
            watch_helper=os.getenv("MISE_RUNNER_WATCH_HELPER", "watchexec").strip(),
            log_level=os.getenv("MISE_RUNNER_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error for values the runner cannot work with."""

        if not self.mise_bin:
            raise ValueError("MISE_RUNNER_MISE_BIN must not be empty.")
        if not self.watch_helper:
            raise ValueError("MISE_RUNNER_WATCH_HELPER must not be empty.")
        if not self.root_dir.is_dir():
            raise ValueError(f"Project root is not a directory: {self.root_dir}")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid MISE_RUNNER_LOG_LEVEL: {self.log_level!r}. "
                f"Expected one of {', '.join(_LOG_LEVELS)}.",
            )


def setup_logging(level: str) -> None:
    """Send log records to stderr; call once from the CLI entry point."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
