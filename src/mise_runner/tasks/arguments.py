"""Interactive collection of task arguments from a usage spec."""

from __future__ import annotations

import logging

from mise_runner.backend.base import Prompter
from mise_runner.tasks.errors import MissingRequiredArgumentError
from mise_runner.tasks.models import FlagArg, PositionalArg, UsageSpec

logger = logging.getLogger(__name__)


class ArgumentCollector:
    """Walks a usage spec and asks the user for each argument and flag.

    Positional arguments come first, then flags, each in declaration order.
    Every question is awaited before the next one is asked because later
    questions depend on earlier answers.
    """

    def __init__(self, prompter: Prompter) -> None:
        self.prompter = prompter

    async def collect(self, spec: UsageSpec) -> list[str]:
        """Return command-line tokens, or raise `MissingRequiredArgumentError`."""

        tokens: list[str] = []
        for arg in spec.args:
            tokens.extend(await self._collect_positional(arg))
        for flag in spec.flags:
            tokens.extend(await self._collect_flag(flag))
        logger.debug("Collected %d argument token(s)", len(tokens))
        return tokens

    async def _collect_positional(self, arg: PositionalArg) -> list[str]:
        value = await self.prompter.ask_text(
            f"Enter value for {arg.name}",
            arg.name,
            arg.required,
        )
        if value:
            return [value]
        if arg.required:
            raise MissingRequiredArgumentError(arg.name)
        return []

    async def _collect_flag(self, flag: FlagArg) -> list[str]:
        if flag.arg is None:
            if await self.prompter.ask_yes_no(f"Enable {flag.name}?"):
                return [flag.name]
            return []

        if not await self.prompter.ask_yes_no(f"Do you want to provide {flag.name}?"):
            return []
        value = await self.prompter.ask_text(f"Enter value for {flag.name}", flag.arg, False)
        if value:
            return [flag.name, value]
        return []
