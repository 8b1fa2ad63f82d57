"""Explicit state for one analysis run.

idle -> fetching -> retrying_failed -> analyzing -> done
any working state -> failed; done/failed -> fetching starts the next attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from lotto_analyzer.errors import InvalidTransitionError

if TYPE_CHECKING:
    from lotto_analyzer.models.draw import DataSet
    from lotto_analyzer.services.frequency_analysis_service import AnalysisSnapshot


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RETRYING_FAILED = "retrying_failed"
    ANALYZING = "analyzing"
    DONE = "done"
    FAILED = "failed"


TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.FETCHING, PipelineState.FAILED}),
    PipelineState.FETCHING: frozenset(
        {PipelineState.RETRYING_FAILED, PipelineState.ANALYZING, PipelineState.FAILED}
    ),
    PipelineState.RETRYING_FAILED: frozenset({PipelineState.ANALYZING, PipelineState.FAILED}),
    PipelineState.ANALYZING: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.DONE: frozenset({PipelineState.FETCHING}),
    PipelineState.FAILED: frozenset({PipelineState.FETCHING}),
}


@dataclass
class PipelineRun:
    """Owned by one request_analysis call and handed to each stage."""

    state: PipelineState = PipelineState.IDLE
    attempt: int = 0
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    dataset: DataSet | None = None
    snapshot: AnalysisSnapshot | None = None
    error: Exception | None = None

    def can_transition(self, new_state: PipelineState) -> bool:
        return new_state in TRANSITIONS[self.state]

    def transition(self, new_state: PipelineState) -> None:
        if not self.can_transition(new_state):
            raise InvalidTransitionError(f"{self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

