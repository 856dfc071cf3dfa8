"""Review orchestration: request, validate, filter, explain."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from reviewthor.agent.prompts import build_explain_prompt, build_review_prompt, format_comment
from reviewthor.agent.service import MessageOptions
from reviewthor.models.comment import ReviewComment
from reviewthor.models.finding import (
    VALID_SEVERITIES,
    Finding,
    ReviewAnalysis,
    ReviewStats,
    Severity,
)
from reviewthor.utils.logging import get_logger

if TYPE_CHECKING:
    from reviewthor.agent.service import ReviewService
    from reviewthor.models.context import ReviewRequest

logger = get_logger("agent.reviewer")

REQUIRED_ISSUE_FIELDS = ("file", "line", "severity", "message", "category")
TEXT_ISSUE_FIELDS = ("file", "message", "category")

ANALYSIS_OPTIONS = MessageOptions(max_tokens=4096, temperature=0.3)
EXPLAIN_OPTIONS = MessageOptions(max_tokens=1024, temperature=0.3)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


class InvalidResponseFormat(Exception):
    """Raised when the review service's answer breaks the response schema."""

    pass


class AnalysisValidationError(ValueError):
    """A specific schema violation inside a parsed analysis."""

    pass


def validate_analysis(analysis: Any) -> None:
    """Check a parsed analysis against the response schema.

    Checks run in a fixed order and the first failure is reported. A single
    bad issue fails the whole analysis.

    Args:
        analysis: Parsed JSON value.

    Raises:
        AnalysisValidationError: On the first violation found.
    """
    if not isinstance(analysis, dict):
        raise AnalysisValidationError("Analysis must be an object")

    if not isinstance(analysis.get("issues"), list):
        raise AnalysisValidationError("Analysis must contain an issues array")

    summary = analysis.get("summary")
    if not summary or not isinstance(summary, str):
        raise AnalysisValidationError("Analysis must contain a summary string")

    if not isinstance(analysis.get("stats"), dict):
        raise AnalysisValidationError("Analysis must contain stats object")

    for issue in analysis["issues"]:
        if not isinstance(issue, dict) or not all(issue.get(f) for f in REQUIRED_ISSUE_FIELDS):
            raise AnalysisValidationError(
                "Each issue must have file, line, severity, message, and category"
            )

        if issue["severity"] not in VALID_SEVERITIES:
            raise AnalysisValidationError("Issue severity must be error, warning, or info")

        if not all(isinstance(issue[f], str) for f in TEXT_ISSUE_FIELDS):
            raise AnalysisValidationError("Issue file, message, and category must be strings")


def _strip_fence(raw: str) -> str:
    # Only the outer fence a model may wrap its JSON in
    cleaned = _FENCE_OPEN.sub("", raw.strip())
    return _FENCE_CLOSE.sub("", cleaned.strip())


class ReviewOrchestrator:
    """Drives the review service and turns its findings into comments."""

    def __init__(self, service: ReviewService) -> None:
        """Initialize the orchestrator.

        Args:
            service: The review service to call.
        """
        self.service = service

    def analyze_code(self, request: ReviewRequest) -> ReviewAnalysis:
        """Ask the review service for findings on a packed request.

        Args:
            request: The packed review request.

        Returns:
            Validated ReviewAnalysis.

        Raises:
            InvalidResponseFormat: If the answer is not valid analysis JSON.
            ReviewServiceError: If the service call fails.
        """
        prompt = build_review_prompt(request)

        logger.info(
            "Requesting review",
            extra={
                "repository": request.repository,
                "files": len(request.files),
                "estimated_tokens": request.token_count,
                "truncated": request.truncated,
            },
        )

        response = self.service.create_message(prompt, ANALYSIS_OPTIONS)

        try:
            data = json.loads(_strip_fence(response.content))
            validate_analysis(data)
            issues = [Finding.from_dict(issue) for issue in data["issues"]]
            stats = ReviewStats.from_dict(data["stats"])
        except (ValueError, TypeError) as e:
            raise InvalidResponseFormat(
                f"Invalid AI response format: {str(e) or 'Unknown error'}"
            ) from e

        return ReviewAnalysis(
            issues=issues,
            summary=data["summary"],
            stats=stats,
        )

    def generate_comments(
        self,
        analysis: ReviewAnalysis,
        minimum_severity: Severity = Severity.INFO,
    ) -> list[ReviewComment]:
        """Turn findings at or above a severity floor into comments.

        Args:
            analysis: Validated analysis.
            minimum_severity: Least severe level still surfaced.

        Returns:
            One comment per admitted finding, in finding order.
        """
        floor = Severity(minimum_severity)

        return [
            ReviewComment(path=issue.file, line=issue.line, body=format_comment(issue))
            for issue in analysis.issues
            if floor.admits(issue.severity)
        ]

    def explain_reasoning(self, finding: Finding) -> str:
        """Ask for a longer free-text rationale for one finding.

        The answer is returned as text without schema validation.

        Args:
            finding: The finding to explain.

        Returns:
            Explanation text.
        """
        response = self.service.create_message(build_explain_prompt(finding), EXPLAIN_OPTIONS)
        return response.content.strip()
