from __future__ import annotations

import asyncio
import os
import signal
import time
from pathlib import Path

import allure
import click
import pytest

from mise_runner import prompting
from mise_runner.controllers import BackendOptions, RunTaskCommand, TaskCliController
from mise_runner.prompting import ClickPrompter
from mise_runner.tasks.models import PositionalArg, TaskInfo, UsageSpec

from .fakes import FakeBackend

pytestmark = [
    allure.epic("Command Line"),
    allure.feature("Interactive Prompts"),
]


def _abort(*args, **kwargs):
    raise click.Abort()


@pytest.mark.asyncio
async def test_cancelled_text_prompt_is_none(monkeypatch) -> None:
    monkeypatch.setattr(prompting.click, "prompt", _abort)

    assert await ClickPrompter().ask_text("Enter value for file", "file", True) is None


@pytest.mark.asyncio
async def test_cancelled_confirm_is_none(monkeypatch) -> None:
    monkeypatch.setattr(prompting.click, "confirm", _abort)

    assert await ClickPrompter().ask_yes_no("Enable --verbose?") is None


@pytest.mark.asyncio
async def test_text_prompt_shows_placeholder_and_strips_value(monkeypatch) -> None:
    labels: list[str] = []

    def _prompt(label, **kwargs):
        labels.append(label)
        return "  prod  "

    monkeypatch.setattr(prompting.click, "prompt", _prompt)

    value = await ClickPrompter().ask_text("Enter value for --env", "<env>", False)

    assert value == "prod"
    assert labels == ["Enter value for --env (<env>)"]


def _interrupt(prompt: str) -> str:
    signal.raise_signal(signal.SIGINT)
    time.sleep(5)
    return "too late"


@pytest.mark.skipif(os.name == "nt", reason="POSIX signal delivery")
def test_ctrl_c_at_required_prompt_fails_the_run(tmp_path: Path, monkeypatch) -> None:
    for name in ("MISE_RUNNER_MISE_BIN", "MISE_RUNNER_ROOT", "MISE_RUNNER_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("click.termui.visible_prompt_func", _interrupt)
    spec = UsageSpec(args=(PositionalArg("target", required=True),))
    backend = FakeBackend(infos={"deploy": TaskInfo("deploy", spec)})
    controller = TaskCliController(backend_factory=lambda settings: backend)

    started = time.monotonic()
    result = controller.run_task(
        RunTaskCommand(options=BackendOptions(root_dir=tmp_path), task_name="deploy"),
    )

    assert time.monotonic() - started < 5
    assert not result.success
    assert result.lines == ["Failed to run task 'deploy': Required argument target was not provided"]
    assert backend.runs == []


@pytest.mark.skipif(os.name == "nt", reason="POSIX signal delivery")
def test_ctrl_c_at_confirm_is_none_and_restores_handler(monkeypatch) -> None:
    monkeypatch.setattr("click.termui.visible_prompt_func", _interrupt)
    before = signal.getsignal(signal.SIGINT)

    assert asyncio.run(ClickPrompter().ask_yes_no("Enable --verbose?")) is None
    assert signal.getsignal(signal.SIGINT) is before
