"""
Posting lifecycle -- per-request state machine.

    PENDING -> STRUCTURALLY_VALID -> BALANCED -> ACCOUNTS_VALID
            -> [FX_RESOLVED] -> VALIDATED

Any gate failure moves the request to REJECTED and halts. There is no
retry-without-change path: the same input always reaches the same state.
"""

from __future__ import annotations

from enum import Enum


class PostingStage(str, Enum):
    """Posting request lifecycle states."""

    PENDING = "pending"
    STRUCTURALLY_VALID = "structurally_valid"
    BALANCED = "balanced"
    ACCOUNTS_VALID = "accounts_valid"
    FX_RESOLVED = "fx_resolved"
    VALIDATED = "validated"
    REJECTED = "rejected"


POSTING_TRANSITIONS: dict[PostingStage, frozenset[PostingStage]] = {
    PostingStage.PENDING: frozenset({
        PostingStage.STRUCTURALLY_VALID,
        PostingStage.REJECTED,
    }),
    PostingStage.STRUCTURALLY_VALID: frozenset({
        PostingStage.BALANCED,
        PostingStage.REJECTED,
    }),
    PostingStage.BALANCED: frozenset({
        PostingStage.ACCOUNTS_VALID,
        PostingStage.REJECTED,
    }),
    PostingStage.ACCOUNTS_VALID: frozenset({
        PostingStage.FX_RESOLVED,
        PostingStage.VALIDATED,
        PostingStage.REJECTED,
    }),
    PostingStage.FX_RESOLVED: frozenset({
        PostingStage.VALIDATED,
        PostingStage.REJECTED,
    }),
    PostingStage.VALIDATED: frozenset(),
    PostingStage.REJECTED: frozenset(),
}

TERMINAL_POSTING_STAGES: frozenset[PostingStage] = frozenset({
    PostingStage.VALIDATED,
    PostingStage.REJECTED,
})


class InvalidStageTransitionError(RuntimeError):
    """Programming error: the orchestrator skipped or reordered a gate."""


def can_transition(current: PostingStage, target: PostingStage) -> bool:
    return target in POSTING_TRANSITIONS[current]


class PostingStageTracker:
    """Records the path a single request takes through the state machine."""

    def __init__(self) -> None:
        self._path: list[PostingStage] = [PostingStage.PENDING]

    @property
    def stage(self) -> PostingStage:
        return self._path[-1]

    @property
    def path(self) -> tuple[PostingStage, ...]:
        return tuple(self._path)

    def advance(self, target: PostingStage) -> PostingStage:
        if not can_transition(self.stage, target):
            raise InvalidStageTransitionError(
                f"Cannot transition from {self.stage.value} to {target.value}"
            )
        self._path.append(target)
        return target

    def reject(self) -> PostingStage:
        """Move to REJECTED; returns the stage the request failed in."""
        failed_in = self.stage
        self.advance(PostingStage.REJECTED)
        return failed_in
