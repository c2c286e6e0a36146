"""Collaborators shared by every workflow step."""

from __future__ import annotations

from dataclasses import dataclass

from geeto.ai.providers.base import AISelection
from geeto.ai.providers.registry import ProviderRegistry
from geeto.ai.suggest import Suggestion, SuggestionContext, SuggestionKind, run_suggestion
from geeto.core.errors import GeetoError
from geeto.core.prompter import Prompter
from geeto.core.result import Err, Ok, Result
from geeto.git.repository import Repository
from geeto.output.console import ConsoleProtocol
from geeto.workflow.checkpoint import CheckpointStore, checkpoint_or_warn
from geeto.workflow.state import WorkflowState, selection_of, with_selection


@dataclass(frozen=True, slots=True)
class WorkflowContext:
    repo: Repository
    store: CheckpointStore
    registry: ProviderRegistry
    prompter: Prompter
    console: ConsoleProtocol

    def save(self, state: WorkflowState) -> Result[WorkflowState, GeetoError]:
        return checkpoint_or_warn(self.store, state, self.console)

    def suggest(
        self,
        state: WorkflowState,
        kind: SuggestionKind,
        input_text: str,
        *,
        prefix: str = "",
    ) -> Result[tuple[Suggestion, WorkflowState], GeetoError]:
        """Run the suggestion loop and fold the final selection into the state.

        Every provider/model switch made inside the loop is checkpointed
        immediately so an interrupted run resumes with the new choice.
        """

        def persist(selection: AISelection) -> None:
            self.save(with_selection(state, selection))

        result = run_suggestion(
            SuggestionContext(
                kind=kind,
                input_text=input_text,
                registry=self.registry,
                prompter=self.prompter,
                console=self.console,
                on_selection=persist,
                prefix=prefix,
            ),
            selection_of(state),
        )
        if isinstance(result, Err):
            return result
        suggestion = result.value
        return Ok((suggestion, with_selection(state, suggestion.selection)))
