"""Data models for reviewthor."""

from reviewthor.models.comment import LineSide, ReviewComment
from reviewthor.models.config import (
    DEFAULT_IGNORED_PATHS,
    DEFAULT_MODEL_ID,
    AppSettings,
    CustomInstructions,
    ReviewConfig,
    ValidationResult,
)
from reviewthor.models.context import (
    FileContext,
    PackedContext,
    PRContext,
    RelatedFiles,
    ReviewRequest,
)
from reviewthor.models.event import EventKind, Repository, WebhookEvent
from reviewthor.models.file_diff import SOURCE_EXTENSIONS, FileDiff, FileStatus
from reviewthor.models.finding import Finding, ReviewAnalysis, ReviewStats, Severity
from reviewthor.models.pull_request import PullRequest
from reviewthor.models.session import ReviewRun, ReviewState

__all__ = [
    "DEFAULT_IGNORED_PATHS",
    "DEFAULT_MODEL_ID",
    "SOURCE_EXTENSIONS",
    "AppSettings",
    "CustomInstructions",
    "EventKind",
    "FileContext",
    "FileDiff",
    "FileStatus",
    "Finding",
    "LineSide",
    "PRContext",
    "PackedContext",
    "PullRequest",
    "RelatedFiles",
    "Repository",
    "ReviewAnalysis",
    "ReviewComment",
    "ReviewConfig",
    "ReviewRequest",
    "ReviewRun",
    "ReviewState",
    "ReviewStats",
    "Severity",
    "ValidationResult",
    "WebhookEvent",
]
