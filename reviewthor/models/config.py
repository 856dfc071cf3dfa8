"""Configuration models for reviewthor."""

from dataclasses import dataclass, field
from typing import Any

from reviewthor.models.file_diff import SOURCE_EXTENSIONS
from reviewthor.models.finding import Severity

# Bedrock model used when none is configured
DEFAULT_MODEL_ID = "anthropic.claude-sonnet-4-20250514-v1:0"

# Paths never sent for review, regardless of repository instructions
DEFAULT_IGNORED_PATHS = [
    "node_modules/**",
    "dist/**",
    "build/**",
    "coverage/**",
    "**/*.min.js",
    "**/*.bundle.js",
    "vendor/**",
]

MAX_TOKENS_LIMIT = 200_000


@dataclass
class ReviewConfig:
    """Effective review policy for one repository."""

    focus_areas: list[str] = field(default_factory=list)
    custom_rules: list[str] = field(default_factory=list)
    ignore_patterns: list[str] = field(default_factory=list)
    severity: Severity = Severity.WARNING
    max_comments_per_pr: int = 20
    enabled_checks: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        if isinstance(self.severity, str):
            self.severity = Severity(self.severity)

        if self.max_comments_per_pr < 0:
            raise ValueError(
                f"max_comments_per_pr must be non-negative, got {self.max_comments_per_pr}"
            )


@dataclass
class CustomInstructions:
    """Review preferences parsed from a repository's ``.reviewthor.md``."""

    focus_areas: list[str] = field(default_factory=list)
    custom_rules: list[str] = field(default_factory=list)
    ignore_patterns: list[str] = field(default_factory=list)
    raw_content: str = ""
    severity: Severity | None = None


@dataclass
class ValidationResult:
    """Outcome of validating custom instructions."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class AppSettings:
    """Process-level settings for the GitHub App and the review service."""

    github_app_id: int = 0
    github_private_key: str = ""
    github_webhook_secret: str = ""
    model_id: str = DEFAULT_MODEL_ID
    max_tokens: int = 4096
    temperature: float = 0.3
    max_files_per_review: int = 50
    max_file_size: int = 1024 * 1024
    token_budget: int = 150_000
    ignored_paths: list[str] = field(default_factory=lambda: DEFAULT_IGNORED_PATHS.copy())
    source_extensions: tuple[str, ...] = SOURCE_EXTENSIONS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.github_app_id < 0:
            raise ValueError(f"Invalid GitHub App ID: {self.github_app_id}")

        if not 0 < self.max_tokens <= MAX_TOKENS_LIMIT:
            raise ValueError(
                f"max_tokens must be between 1 and {MAX_TOKENS_LIMIT}, got {self.max_tokens}"
            )

        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0.0 and 1.0, got {self.temperature}")

        if self.max_files_per_review <= 0:
            raise ValueError(
                f"max_files_per_review must be positive, got {self.max_files_per_review}"
            )

        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")

        if self.token_budget <= 0:
            raise ValueError(f"token_budget must be positive, got {self.token_budget}")

        self.source_extensions = tuple(self.source_extensions)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "AppSettings":
        """Create settings from a flat dictionary, ignoring unknown keys.

        Args:
            config: Settings dictionary (e.g., from a YAML settings file).

        Returns:
            AppSettings instance.
        """
        known = cls.__dataclass_fields__.keys()
        return cls(**{key: value for key, value in config.items() if key in known})

    @classmethod
    def default(cls) -> "AppSettings":
        """Create default settings."""
        return cls()
