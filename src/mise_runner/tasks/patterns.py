"""File patterns that can change the set of mise tasks."""

from __future__ import annotations

import re
from functools import lru_cache

MISE_CONFIG_PATTERNS: tuple[str, ...] = (
    "mise.toml",
    "mise.local.toml",
    "mise.*.toml",
    ".mise.toml",
    ".mise.local.toml",
    ".mise.*.toml",
    "mise/config.toml",
    ".mise/config.toml",
    ".config/mise.toml",
    ".config/mise/config.toml",
    ".config/mise/conf.d/*.toml",
    ".tool-versions",
)

IDIOMATIC_FILE_PATTERNS: tuple[str, ...] = (
    ".nvmrc",
    ".node-version",
    ".python-version",
    ".python-versions",
    ".ruby-version",
    ".go-version",
    ".java-version",
    ".sdkmanrc",
    ".bun-version",
    ".yvmrc",
    ".terraform-version",
)

TASK_DIRECTORIES: tuple[str, ...] = (
    "mise-tasks",
    ".mise-tasks",
    "mise/tasks",
    ".mise/tasks",
    ".config/mise/tasks",
)

TASK_DIRECTORY_PATTERNS: tuple[str, ...] = tuple(f"{directory}/**/*" for directory in TASK_DIRECTORIES)


def matches_any(relative_path: str, patterns: tuple[str, ...]) -> bool:
    """Match a root-relative POSIX path against glob patterns.

    `*` and `?` stay within one path segment, `**/` spans any number of them.
    """

    return any(_compile(pattern).match(relative_path) for pattern in patterns)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("".join(parts) + r"\Z")
