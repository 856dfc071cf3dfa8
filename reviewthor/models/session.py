"""Review run model."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class ReviewState(str, Enum):
    """Stage of a pull request review run."""

    PENDING = "pending"
    LOADING = "loading"
    REVIEWING = "reviewing"
    POSTING = "posting"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ReviewState.COMPLETED, ReviewState.SKIPPED, ReviewState.FAILED})

VALID_TRANSITIONS: dict[ReviewState, set[ReviewState]] = {
    ReviewState.PENDING: {ReviewState.LOADING, ReviewState.SKIPPED, ReviewState.FAILED},
    ReviewState.LOADING: {ReviewState.REVIEWING, ReviewState.SKIPPED, ReviewState.FAILED},
    ReviewState.REVIEWING: {ReviewState.POSTING, ReviewState.FAILED},
    ReviewState.POSTING: {ReviewState.COMPLETED, ReviewState.FAILED},
    ReviewState.COMPLETED: set(),
    ReviewState.SKIPPED: set(),
    ReviewState.FAILED: set(),
}


@dataclass
class ReviewRun:
    """Tracks one pull request review through its stages.

    In-memory only; one instance per webhook delivery.
    """

    correlation_id: str
    repository: str
    pr_number: int
    state: ReviewState = ReviewState.PENDING
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    files_reviewed: int = 0
    comments_posted: int = 0
    error: str | None = None

    def transition_to(self, new_state: ReviewState) -> None:
        """Transition to a new state with validation.

        Args:
            new_state: The state to transition to.

        Raises:
            ValueError: If the transition is invalid.
        """
        valid_next_states = VALID_TRANSITIONS.get(self.state, set())

        if new_state not in valid_next_states:
            raise ValueError(
                f"Invalid transition: {self.state.value} -> {new_state.value}. "
                f"Valid transitions: {sorted(s.value for s in valid_next_states)}"
            )

        self.state = new_state

        if new_state in TERMINAL_STATES:
            self.completed_at = datetime.now(UTC)

    def fail(self, error: str) -> None:
        """Move to the failed state from any non-terminal state.

        Args:
            error: The error message.
        """
        self.error = error
        if not self.is_terminal:
            self.state = ReviewState.FAILED
            self.completed_at = datetime.now(UTC)

    @property
    def is_terminal(self) -> bool:
        """Check if the run has finished."""
        return self.state in TERMINAL_STATES

    @property
    def duration_ms(self) -> int | None:
        """Run duration in milliseconds, if finished."""
        if self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds() * 1000)
