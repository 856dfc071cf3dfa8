"""Pull request model."""

from dataclasses import dataclass
from typing import Any


@dataclass
class PullRequest:
    """The pull request carried by a webhook event."""

    number: int
    title: str = ""
    body: str | None = None
    author: str = "unknown"
    head_sha: str | None = None
    draft: bool = False

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")

    @classmethod
    def from_webhook_payload(cls, payload: dict[str, Any]) -> "PullRequest":
        """Create a PullRequest from a pull_request webhook payload.

        Args:
            payload: The webhook payload containing pull_request data.

        Returns:
            PullRequest instance.

        Raises:
            KeyError: If the pull request or its number is missing.
            ValueError: If field values are invalid.
        """
        pr = payload["pull_request"]
        return cls(
            number=pr.get("number") or payload["number"],
            title=pr.get("title") or "",
            body=pr.get("body"),
            author=(pr.get("user") or {}).get("login") or "unknown",
            head_sha=(pr.get("head") or {}).get("sha"),
            draft=bool(pr.get("draft", False)),
        )
