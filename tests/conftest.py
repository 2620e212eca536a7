"""Shared test fixtures."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

_FAKE_MISE = '''
import json
import os
import sys
from pathlib import Path

TASKS = json.loads(os.environ.get("FAKE_MISE_TASKS", "[]"))
INFOS = json.loads(os.environ.get("FAKE_MISE_INFOS", "{}"))
TOOLS = json.loads(os.environ.get("FAKE_MISE_TOOLS", "{}"))
CONFIGS = json.loads(os.environ.get("FAKE_MISE_CONFIGS", "[]"))
ENV = json.loads(os.environ.get("FAKE_MISE_ENV", "{}"))

args = sys.argv[1:]
log_path = os.environ.get("FAKE_MISE_LOG")
if log_path:
    with Path(log_path).open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(args) + "\\n")

if args[:2] == ["tasks", "ls"]:
    if "--json" in args:
        print(json.dumps(TASKS))
    else:
        for task in TASKS:
            print(f"{task['name']}  {task.get('description', '')}")
elif args[:2] == ["tasks", "info"]:
    name = args[2]
    if name not in INFOS:
        print(f"mise ERROR no task named `{name}` found", file=sys.stderr)
        raise SystemExit(1)
    print(json.dumps(INFOS[name]))
elif args[:1] == ["ls"]:
    print(json.dumps(TOOLS))
elif args[:2] == ["env", "--json"]:
    print(json.dumps(ENV))
elif args[:2] == ["config", "ls"]:
    print(json.dumps(CONFIGS))
elif args[:1] in (["run"], ["watch"]):
    raise SystemExit(int(os.environ.get("FAKE_MISE_EXIT", "0")))
else:
    print(f"unsupported: {args}", file=sys.stderr)
    raise SystemExit(2)
'''


@pytest.fixture()
def fake_mise(tmp_path: Path, monkeypatch) -> Path:
    """Install a scripted `mise` executable on PATH and return its path."""

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    implementation = bin_dir / "mise_impl.py"
    implementation.write_text(_FAKE_MISE.strip() + "\n", "utf-8")

    if os.name == "nt":
        launcher = bin_dir / "mise.cmd"
        launcher.write_text(
            f'@echo off\r\n"{sys.executable}" "{implementation}" %*\r\n',
            "utf-8",
        )
    else:
        launcher = bin_dir / "mise"
        launcher.write_text(
            f'#!/usr/bin/env sh\nexec "{sys.executable}" "{implementation}" "$@"\n',
            "utf-8",
        )
        launcher.chmod(launcher.stat().st_mode | stat.S_IXUSR)

    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("FAKE_MISE_LOG", str(tmp_path / "mise-calls.log"))
    for name in ("MISE_RUNNER_MISE_BIN", "MISE_RUNNER_ROOT", "MISE_RUNNER_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    return launcher
