"""Context models sent to the review service."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileContext:
    """One changed file prepared for review."""

    path: str
    content: str
    diff: str
    language: str = "unknown"

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if not self.path:
            raise ValueError("FileContext path cannot be empty")

        if not self.diff and self.content:
            raise ValueError(f"FileContext for {self.path} has content but no diff")


@dataclass(frozen=True)
class PRContext:
    """Pull request metadata included with every review request."""

    title: str = ""
    description: str = ""
    author: str = "unknown"
    target_branch: str = "main"
    source_branch: str = "feature"


@dataclass
class RelatedFiles:
    """Advisory context discovered by scanning a file's source text."""

    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    tests: list[str] = field(default_factory=list)


@dataclass
class PackedContext:
    """File contexts after fitting them into the token budget."""

    files: list[FileContext]
    pr: PRContext
    truncated: bool
    token_count: int


@dataclass
class ReviewRequest:
    """The bundle sent to the review service for one pull request."""

    files: list[FileContext]
    pr_description: str
    repository: str
    token_count: int = 0
    truncated: bool = False
    instructions: str | None = None
