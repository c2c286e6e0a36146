"""CLI context: project root, console and checkpoint store."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from geeto.ai.http import RealHttpClient
from geeto.ai.providers.registry import ProviderRegistry
from geeto.cli.helpers import value_or_exit
from geeto.cli.prompter import TerminalPrompter
from geeto.core.config import load_provider_config
from geeto.core.errors import GeetoError
from geeto.core.result import Err, Ok, Result
from geeto.git.repository import Repository, find_repository_root
from geeto.output.console import ConsoleProtocol, RichConsole
from geeto.workflow.checkpoint import CheckpointStore
from geeto.workflow.context import WorkflowContext


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    console: ConsoleProtocol
    store: CheckpointStore


def resolve_project_root(project: Path | None) -> Result[Path, GeetoError]:
    """``--project`` as given, else the top level of the repository around cwd."""
    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            return Err(GeetoError(kind="io_failed", message=f"invalid --project: {e}"))
        if not root.is_dir():
            return Err(GeetoError(kind="io_failed", message=f"project directory not found: {root}"))
        return Ok(root)

    found = find_repository_root(Path.cwd())
    if isinstance(found, Err):
        return Err(
            GeetoError(
                kind="io_failed",
                message=found.error.message,
                hint="run geeto inside a git repository or pass --project",
            )
        )
    return Ok(found.value)


def build_context(project: Path | None, console: ConsoleProtocol | None = None) -> CLIContext:
    console = console or RichConsole()
    root = value_or_exit(resolve_project_root(project), console)
    return CLIContext(root=root, console=console, store=CheckpointStore(root))


def build_workflow_context(cli: CLIContext) -> WorkflowContext:
    config = value_or_exit(load_provider_config(cli.root), cli.console)
    return WorkflowContext(
        repo=Repository(cli.root),
        store=cli.store,
        registry=ProviderRegistry.from_config(config, RealHttpClient()),
        prompter=TerminalPrompter(),
        console=cli.console,
    )
