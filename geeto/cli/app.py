from __future__ import annotations

from pathlib import Path

import typer

from geeto import __version__
from geeto.ai.providers.registry import display_name
from geeto.cli.context import build_context, build_workflow_context
from geeto.cli.helpers import exit_with_error, value_or_exit
from geeto.cli.selector import is_interactive_terminal
from geeto.core.errors import GeetoError
from geeto.core.result import Err
from geeto.output.console import RichConsole, Style
from geeto.workflow.machine import RunOptions, StartAt, run_workflow
from geeto.workflow.state import selection_of, step_name

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
    help="Stage, branch, commit, push, merge and clean up, with resumable checkpoints.",
)


def _start_at(flags: dict[StartAt, bool]) -> StartAt | None:
    chosen = [name for name, on in flags.items() if on]
    if len(chosen) > 1:
        options = ", ".join(f"--{name}" for name in chosen)
        raise typer.BadParameter(f"only one start step may be given (got {options})")
    return chosen[0] if chosen else None


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    stage: bool = typer.Option(False, "--stage", help="Start at the stage step."),
    branch: bool = typer.Option(False, "--branch", help="Start at the branch step."),
    commit: bool = typer.Option(False, "--commit", help="Start at the commit step."),
    push: bool = typer.Option(False, "--push", help="Start at the push step."),
    merge: bool = typer.Option(False, "--merge", help="Start at the merge step."),
    cleanup: bool = typer.Option(False, "--cleanup", help="Start at the cleanup step."),
    fresh: bool = typer.Option(False, "--fresh", help="Ignore any saved checkpoint."),
    resume: bool = typer.Option(False, "--resume", help="Resume without asking."),
    stage_all: bool = typer.Option(False, "--stage-all", "-a", help="Stage all changes."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root (defaults to the git top level of the current directory).",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    ctx.obj = project
    if ctx.invoked_subcommand is not None:
        return

    console = RichConsole()
    if fresh and resume:
        exit_with_error(
            GeetoError(kind="invalid_input", message="--fresh and --resume cannot be combined"),
            console,
        )
    start_at = _start_at(
        {
            "stage": stage,
            "branch": branch,
            "commit": commit,
            "push": push,
            "merge": merge,
            "cleanup": cleanup,
        }
    )

    cli = build_context(project, console)
    if not is_interactive_terminal():
        exit_with_error(
            GeetoError(
                kind="invalid_input",
                message="geeto is interactive and needs a terminal",
            ),
            console,
        )

    result = run_workflow(
        build_workflow_context(cli),
        RunOptions(start_at=start_at, fresh=fresh, resume=resume, stage_all=stage_all),
    )
    if isinstance(result, Err):
        exit_with_error(result.error, console)


@app.command("state")
def state_cmd(
    ctx: typer.Context,
    clear: bool = typer.Option(False, "--clear", help="Delete the saved checkpoint."),
) -> None:
    """Show (or clear) the saved workflow checkpoint."""
    cli = build_context(ctx.obj)
    console = cli.console

    if clear:
        value_or_exit(cli.store.clear(), console)
        console.success("Checkpoint cleared")
        return

    state = cli.store.load()
    if state is None:
        console.info("No saved workflow")
        return

    selection = selection_of(state)
    provider = display_name(selection.provider)
    if selection.model:
        provider = f"{provider} ({selection.model})"
    console.header("Saved workflow")
    console.print(f"step:            {step_name(state.step)}")
    console.print(f"working branch:  {state.working_branch or '-'}")
    console.print(f"target branch:   {state.target_branch or '-'}")
    console.print(f"current branch:  {state.current_branch or '-'}")
    console.print(f"AI provider:     {provider}")
    console.print(f"saved at:        {state.timestamp or '-'}", Style.DIM)
    console.print(f"file:            {cli.store.path}", Style.DIM)


def main() -> None:
    app()
