"""Terminal prompter backed by click."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import click


class ClickPrompter:
    """Ask questions on the terminal; Ctrl-C or EOF counts as cancellation.

    Prompts run on the calling thread and block the event loop while they wait:
    only one question is ever on screen, and Ctrl-C has to reach `input()`.
    """

    async def ask_text(self, prompt_label: str, placeholder: str, required: bool) -> str | None:
        label = prompt_label if placeholder in prompt_label else f"{prompt_label} ({placeholder})"
        if required:
            label = f"{label} [required]"
        return _prompt_text(label)

    async def ask_yes_no(self, prompt_label: str) -> bool | None:
        return _confirm(prompt_label)


def _prompt_text(label: str) -> str | None:
    try:
        with _interruptible():
            value = click.prompt(label, default="", show_default=False)
    except click.Abort:
        return None
    return str(value).strip()


def _confirm(label: str) -> bool | None:
    try:
        with _interruptible():
            return click.confirm(label, default=False)
    except click.Abort:
        return None


@contextmanager
def _interruptible() -> Iterator[None]:
    """Let SIGINT raise `KeyboardInterrupt` in the prompt.

    `asyncio.run` replaces the SIGINT handler with one that cancels the main task,
    which leaves a blocking `input()` waiting for a line.
    """

    if not hasattr(signal, "SIGINT") or threading.current_thread() is not threading.main_thread():
        yield
        return

    original_sigint = signal.getsignal(signal.SIGINT)
    signal.signal(signal.SIGINT, signal.default_int_handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, original_sigint)
