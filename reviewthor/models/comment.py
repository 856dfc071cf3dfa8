"""Review comment model."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class LineSide(str, Enum):
    """Side of the diff for inline comments."""

    LEFT = "LEFT"  # Removed line (base)
    RIGHT = "RIGHT"  # Added line (head)


@dataclass
class ReviewComment:
    """An inline comment to be posted on the pull request."""

    path: str
    line: int
    body: str
    side: LineSide = LineSide.RIGHT

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.path:
            raise ValueError("Comment path cannot be empty")

        if self.line < 1:
            raise ValueError(f"Comment line must be at least 1, got {self.line}")

        if not self.body:
            raise ValueError("Comment body cannot be empty")

        # Normalize side to LineSide enum if string
        if isinstance(self.side, str):
            self.side = LineSide(self.side)

    def to_github_review_comment(self) -> dict[str, Any]:
        """Convert to GitHub API format for review comments.

        Returns:
            Dictionary in GitHub's review comment format.
        """
        return {
            "path": self.path,
            "line": self.line,
            "side": self.side.value,
            "body": self.body,
        }
