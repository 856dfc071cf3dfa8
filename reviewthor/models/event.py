"""Classified webhook event model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Closed set of webhook events the app understands."""

    PR_OPENED = "pull_request.opened"
    PR_SYNCHRONIZE = "pull_request.synchronize"
    PR_REOPENED = "pull_request.reopened"
    REVIEW_SUBMITTED = "pull_request_review.submitted"

    @property
    def is_pull_request(self) -> bool:
        """Check if this kind is one of the pull request lifecycle events."""
        return self.value.startswith("pull_request.")


@dataclass(frozen=True)
class Repository:
    """Repository an event belongs to."""

    owner: str
    name: str

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.owner:
            raise ValueError("Repository owner cannot be empty")
        if not self.name:
            raise ValueError("Repository name cannot be empty")

    @property
    def full_name(self) -> str:
        """Repository in owner/repo format."""
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class WebhookEvent:
    """An inbound webhook payload after classification."""

    kind: EventKind
    repository: Repository
    installation_id: int
    payload: dict[str, Any] = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.installation_id <= 0:
            raise ValueError(f"Installation ID must be positive, got {self.installation_id}")

    @property
    def action(self) -> str:
        """The raw webhook action."""
        return str(self.payload.get("action", ""))
