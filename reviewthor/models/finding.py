"""Review findings returned by the review service."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity of a finding, most severe first."""

    ERROR = "error"  # Must fix
    WARNING = "warning"  # Should fix
    INFO = "info"  # Suggestion

    @property
    def rank(self) -> int:
        """Position in the severity order: error 0, warning 1, info 2."""
        return SEVERITY_ORDER[self]

    def admits(self, severity: "Severity") -> bool:
        """Check if a finding of ``severity`` passes this floor.

        A floor admits everything at least as severe as itself.
        """
        return severity.rank <= self.rank


SEVERITY_ORDER: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}

VALID_SEVERITIES = frozenset(s.value for s in Severity)


@dataclass
class Finding:
    """One problem identified by the reviewer."""

    file: str
    line: int
    severity: Severity
    message: str
    category: str
    suggestion: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.file:
            raise ValueError("Finding file cannot be empty")

        if self.line < 1:
            raise ValueError(f"Finding line must be at least 1, got {self.line}")

        if not self.message:
            raise ValueError("Finding message cannot be empty")

        if isinstance(self.severity, str):
            self.severity = Severity(self.severity)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        """Create a Finding from one entry of the service's ``issues`` array.

        Args:
            data: Issue dictionary that already passed schema validation.

        Returns:
            Finding instance.
        """
        return cls(
            file=data["file"],
            line=int(data["line"]),
            severity=Severity(data["severity"]),
            message=data["message"],
            category=data["category"],
            suggestion=data.get("suggestion") or None,
        )


@dataclass
class ReviewStats:
    """Aggregate counts reported alongside the findings."""

    total: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewStats":
        """Create stats from the service's ``stats`` object."""
        total = data.get("total", 0)
        by_category = data.get("byCategory")
        by_severity = data.get("bySeverity")
        return cls(
            total=total if isinstance(total, int) else 0,
            by_category=dict(by_category) if isinstance(by_category, dict) else {},
            by_severity=dict(by_severity) if isinstance(by_severity, dict) else {},
        )


@dataclass
class ReviewAnalysis:
    """Validated result of one review request."""

    issues: list[Finding]
    summary: str
    stats: ReviewStats = field(default_factory=ReviewStats)
