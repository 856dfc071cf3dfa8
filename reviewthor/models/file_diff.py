"""Changed file model."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FileStatus(str, Enum):
    """Status of a file in a pull request."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


# Extensions the reviewer understands
SOURCE_EXTENSIONS: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")


@dataclass
class FileDiff:
    """A single file's changes as reported by the pull request files API."""

    filename: str
    status: FileStatus
    additions: int
    deletions: int
    changes: int
    patch: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.filename:
            raise ValueError("filename cannot be empty")

        for name in ("additions", "deletions", "changes"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if isinstance(self.status, str):
            self.status = FileStatus(self.status)

    def has_extension(self, extensions: tuple[str, ...] = SOURCE_EXTENSIONS) -> bool:
        """Check if the filename ends with one of the given extensions."""
        return self.filename.lower().endswith(extensions)

    @classmethod
    def from_github_file(cls, file: dict[str, Any]) -> "FileDiff":
        """Create a FileDiff from a GitHub API file response.

        Args:
            file: File data from GitHub's pull request files API.

        Returns:
            FileDiff instance.
        """
        additions = file.get("additions", 0)
        deletions = file.get("deletions", 0)
        return cls(
            filename=file["filename"],
            status=FileStatus(file.get("status", "modified")),
            additions=additions,
            deletions=deletions,
            changes=file.get("changes", additions + deletions),
            patch=file.get("patch"),
        )
