"""CLI entrypoint for mise-runner."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import rich_click as click

from mise_runner import __version__
from mise_runner.backend import BackendCommandError
from mise_runner.config import setup_logging
from mise_runner.controllers import (
    BackendOptions,
    ObserveCommand,
    RunTaskCommand,
    TaskCliController,
)

click.rich_click.USE_MARKDOWN = True
TASK_CONTROLLER = TaskCliController()


def _backend_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = click.option(
        "--mise-bin",
        default=None,
        help="mise executable to call. Defaults to MISE_RUNNER_MISE_BIN or `mise`.",
    )(command)
    return click.option(
        "--root",
        "root_dir",
        type=click.Path(path_type=Path, file_okay=False),
        default=None,
        help="Project directory. Defaults to MISE_RUNNER_ROOT or the current directory.",
    )(command)


@click.group()
@click.version_option(version=__version__, prog_name="mise-runner")
@click.option(
    "--log-level",
    type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"], case_sensitive=False),
    envvar="MISE_RUNNER_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Log verbosity on stderr.",
)
def mise_runner(log_level: str) -> None:
    """Run and watch **mise** tasks, asking for task arguments interactively."""

    setup_logging(log_level)


@mise_runner.command("list")
@_backend_options
def list_tasks(root_dir: Path | None, mise_bin: str | None) -> None:
    """List tasks grouped by the file that defines them."""

    with _user_errors():
        _emit_lines(TASK_CONTROLLER.list_tasks(BackendOptions(root_dir=root_dir, mise_bin=mise_bin)))


@mise_runner.command("run")
@click.argument("task_name")
@_backend_options
def run_task(task_name: str, root_dir: Path | None, mise_bin: str | None) -> None:
    """Run TASK_NAME, prompting for its arguments and flags."""

    _run_or_watch(task_name, BackendOptions(root_dir=root_dir, mise_bin=mise_bin), watch=False)


@mise_runner.command("watch")
@click.argument("task_name")
@_backend_options
def watch_task(task_name: str, root_dir: Path | None, mise_bin: str | None) -> None:
    """Run TASK_NAME in watch mode (requires `watchexec`)."""

    _run_or_watch(task_name, BackendOptions(root_dir=root_dir, mise_bin=mise_bin), watch=True)


@mise_runner.command("tools")
@_backend_options
def list_tools(root_dir: Path | None, mise_bin: str | None) -> None:
    """List installed tools and their versions."""

    with _user_errors():
        _emit_lines(TASK_CONTROLLER.list_tools(BackendOptions(root_dir=root_dir, mise_bin=mise_bin)))


@mise_runner.command("config-files")
@_backend_options
def list_config_files(root_dir: Path | None, mise_bin: str | None) -> None:
    """List the mise config files that apply to the project."""

    with _user_errors():
        _emit_lines(
            TASK_CONTROLLER.list_config_files(BackendOptions(root_dir=root_dir, mise_bin=mise_bin)),
        )


@mise_runner.command("envs")
@_backend_options
def list_env_vars(root_dir: Path | None, mise_bin: str | None) -> None:
    """List the environment variables mise sets for the project."""

    with _user_errors():
        _emit_lines(
            TASK_CONTROLLER.list_env_vars(BackendOptions(root_dir=root_dir, mise_bin=mise_bin)),
        )


@mise_runner.command("observe")
@_backend_options
@click.option(
    "--max-changes",
    type=click.IntRange(min=1),
    default=None,
    help="Exit after this many reported changes. Runs until interrupted by default.",
)
def observe(root_dir: Path | None, mise_bin: str | None, max_changes: int | None) -> None:
    """Report task changes whenever mise config, version, or task files change."""

    with _user_errors():
        try:
            TASK_CONTROLLER.observe(
                ObserveCommand(
                    options=BackendOptions(root_dir=root_dir, mise_bin=mise_bin),
                    max_changes=max_changes,
                ),
                click.echo,
            )
        except KeyboardInterrupt:
            click.echo("Stopped.")


def _run_or_watch(task_name: str, options: BackendOptions, *, watch: bool) -> None:
    with _user_errors():
        result = TASK_CONTROLLER.run_task(
            RunTaskCommand(options=options, task_name=task_name, watch=watch),
        )
    if not result.success:
        raise click.ClickException("\n".join(result.lines))
    _emit_lines(result.lines)


@contextmanager
def _user_errors() -> Iterator[None]:
    try:
        yield
    except (BackendCommandError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    mise_runner()
