"""Unit tests for the pull request review pipeline."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from reviewthor.agent.service import ServiceResponse
from reviewthor.models.comment import ReviewComment
from reviewthor.models.config import AppSettings
from reviewthor.models.event import EventKind, Repository, WebhookEvent
from reviewthor.models.file_diff import FileDiff, FileStatus
from reviewthor.models.session import ReviewRun, ReviewState
from reviewthor.pipeline import filter_comments, handle_pull_request, select_files
from reviewthor.tools.github import GitHubToolError
from reviewthor.webhook.handler import classify_event
from tests.fixtures.review_responses import create_analysis_json, create_issue
from tests.fixtures.webhook_payloads import (
    create_github_client,
    create_github_file,
    create_pr_payload,
)


def _diff(filename: str, changes: int = 1) -> FileDiff:
    return FileDiff(
        filename=filename,
        status=FileStatus.MODIFIED,
        additions=changes,
        deletions=0,
        changes=changes,
    )


def _service(content: str) -> MagicMock:
    service = MagicMock()
    service.create_message.return_value = ServiceResponse(content=content)
    return service


def _run(
    payload: dict[str, Any],
    settings: AppSettings,
    client: MagicMock,
    service: MagicMock,
) -> ReviewRun:
    return handle_pull_request(
        classify_event(payload),
        "delivery-1",
        settings,
        client_factory=lambda installation_id, s: client,
        service_factory=lambda s: service,
    )


class TestSelectFiles:
    """Tests for choosing which files to review."""

    def test_drops_large_and_ignored_files(self) -> None:
        """Test the size and path filters."""
        settings = AppSettings(max_file_size=100)
        files = [
            _diff("src/a.js"),
            _diff("src/huge.js", changes=101),
            _diff("dist/bundle.js"),
            _diff("src/lib/jquery.min.js"),
            _diff("src/b.ts", changes=100),
        ]

        selected = select_files(files, settings)

        assert [f.filename for f in selected] == ["src/a.js", "src/b.ts"]

    def test_file_limit_keeps_host_order(self) -> None:
        """Test that the first files are kept and a warning is logged."""
        settings = AppSettings(max_files_per_review=2)
        log = MagicMock()

        selected = select_files([_diff("a.js"), _diff("b.js"), _diff("c.js")], settings, log)

        assert [f.filename for f in selected] == ["a.js", "b.js"]
        log.warning.assert_called_once_with(
            "File limit exceeded, reviewing subset",
            extra={"total_files": 3, "reviewing_files": 2},
        )

    def test_no_warning_at_limit(self) -> None:
        """Test that exactly the limit is not a truncation."""
        log = MagicMock()

        select_files([_diff("a.js"), _diff("b.js")], AppSettings(max_files_per_review=2), log)

        log.warning.assert_not_called()


class TestFilterComments:
    """Tests for the comment path filter and cap."""

    def test_filter_and_cap(self) -> None:
        """Test that ignored paths are dropped before the cap applies."""
        comments = [
            ReviewComment(path="build/out.js", line=1, body="a"),
            ReviewComment(path="src/a.js", line=1, body="b"),
            ReviewComment(path="src/b.js", line=2, body="c"),
            ReviewComment(path="src/c.js", line=3, body="d"),
        ]

        kept = filter_comments(comments, ["build/**"], limit=2)

        assert [c.body for c in kept] == ["b", "c"]

    def test_zero_limit(self) -> None:
        """Test that a zero cap posts nothing."""
        comments = [ReviewComment(path="src/a.js", line=1, body="b")]

        assert filter_comments(comments, [], limit=0) == []


class TestHandlePullRequest:
    """Tests for the end to end pipeline with mocked collaborators."""

    def test_posts_comments_above_floor(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test the default warning floor and the posted review."""
        client = create_github_client(files=[create_github_file("src/index.js")])
        service = _service(
            create_analysis_json(
                [
                    create_issue(line=10, severity="error", message="Null dereference"),
                    create_issue(line=3, severity="info", message="Consider a comment"),
                ]
            )
        )

        run = _run(sample_pr_payload, settings, client, service)

        assert run.state == ReviewState.COMPLETED
        assert run.files_reviewed == 1
        assert run.comments_posted == 1
        pr = client.get_repo.return_value.get_pull.return_value
        pr.create_review.assert_called_once()
        (comment,) = pr.create_review.call_args.kwargs["comments"]
        assert comment["path"] == "src/index.js"
        assert comment["line"] == 10
        assert "Null dereference" in comment["body"]

    def test_prompt_carries_diff_and_default_rules(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test what is sent to the review service."""
        client = create_github_client(files=[create_github_file("src/index.js")])
        service = _service(create_analysis_json())

        _run(sample_pr_payload, settings, client, service)

        prompt = service.create_message.call_args.args[0]
        assert "Repository: owner/repo" in prompt
        assert "This PR adds a new feature." in prompt
        assert "File: src/index.js" in prompt
        assert "+const b = 2;" in prompt
        assert "- Use const/let instead of var" in prompt

    def test_no_comments_completes_without_posting(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test a clean review."""
        client = create_github_client(files=[create_github_file("src/index.js")])

        run = _run(sample_pr_payload, settings, client, _service(create_analysis_json()))

        assert run.state == ReviewState.COMPLETED
        assert run.comments_posted == 0
        client.get_repo.return_value.get_pull.return_value.create_review.assert_not_called()

    def test_draft_is_skipped(self, settings: AppSettings) -> None:
        """Test that drafts make no GitHub calls."""
        factory = MagicMock()
        service = _service(create_analysis_json())

        run = handle_pull_request(
            classify_event(create_pr_payload(draft=True)),
            "delivery-1",
            settings,
            client_factory=factory,
            service_factory=lambda s: service,
        )

        assert run.state == ReviewState.SKIPPED
        factory.assert_not_called()
        service.create_message.assert_not_called()

    def test_no_source_files_is_skipped(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test that a PR without reviewable files never reaches the service."""
        client = create_github_client(
            files=[create_github_file("README.md"), create_github_file("dist/app.js")]
        )
        service = _service(create_analysis_json())

        run = _run(sample_pr_payload, settings, client, service)

        assert run.state == ReviewState.SKIPPED
        service.create_message.assert_not_called()

    def test_custom_instructions_change_floor_and_ignores(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test that repository instructions are applied to the comments."""
        instructions = (
            "# Review\n\n"
            "## Severity\ninfo\n\n"
            "## Ignore Patterns\n- src/legacy/**\n"
        )
        client = create_github_client(
            files=[create_github_file("src/index.js"), create_github_file("src/legacy/old.js")],
            instructions=instructions,
        )
        service = _service(
            create_analysis_json(
                [
                    create_issue(line=3, severity="info"),
                    create_issue(file="src/legacy/old.js", line=1, severity="error"),
                ]
            )
        )

        run = _run(sample_pr_payload, settings, client, service)

        assert run.state == ReviewState.COMPLETED
        assert run.comments_posted == 1
        pr = client.get_repo.return_value.get_pull.return_value
        (comment,) = pr.create_review.call_args.kwargs["comments"]
        assert comment["path"] == "src/index.js"

    def test_invalid_response_fails_run(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test that a contract violation is caught and nothing is posted."""
        client = create_github_client(files=[create_github_file("src/index.js")])

        run = _run(sample_pr_payload, settings, client, _service("I found no issues!"))

        assert run.state == ReviewState.FAILED
        assert run.error is not None
        assert run.error.startswith("Invalid AI response format")
        client.get_repo.return_value.get_pull.return_value.create_review.assert_not_called()

    @pytest.mark.parametrize(
        "error", [GitHubToolError("Authentication failed: 401"), RuntimeError("boom")]
    )
    def test_client_failure_is_swallowed(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any], error: Exception
    ) -> None:
        """Test that failures never escape the pipeline."""

        def failing_factory(installation_id: int, s: AppSettings) -> MagicMock:
            raise error

        run = handle_pull_request(
            classify_event(sample_pr_payload),
            "delivery-1",
            settings,
            client_factory=failing_factory,
            service_factory=lambda s: _service(create_analysis_json()),
        )

        assert run.state == ReviewState.FAILED
        assert run.error == str(error)

    def test_info_findings_dropped_without_repository_config(
        self, settings: AppSettings, sample_pr_payload: dict[str, Any]
    ) -> None:
        """Test that a repository without instructions reviews at the warning floor."""
        client = create_github_client(files=[create_github_file("src/index.js")], instructions=None)
        service = _service(
            create_analysis_json(
                [
                    create_issue(line=1, severity="info", message="Consider a comment"),
                    create_issue(line=2, severity="warning", message="Unused variable"),
                ]
            )
        )

        run = _run(sample_pr_payload, settings, client, service)

        assert run.state == ReviewState.COMPLETED
        assert run.comments_posted == 1
        pr = client.get_repo.return_value.get_pull.return_value
        (comment,) = pr.create_review.call_args.kwargs["comments"]
        assert comment["line"] == 2
        assert "Unused variable" in comment["body"]

    def test_non_object_pull_request_fails_run(self, settings: AppSettings) -> None:
        """Test that a malformed pull_request never escapes the pipeline."""
        factory = MagicMock()
        event = WebhookEvent(
            kind=EventKind.PR_OPENED,
            repository=Repository(owner="owner", name="repo"),
            installation_id=12345,
            payload={"action": "opened", "pull_request": "yes"},
        )

        run = handle_pull_request(
            event,
            "delivery-1",
            settings,
            client_factory=factory,
            service_factory=lambda s: _service(create_analysis_json()),
        )

        assert run.state == ReviewState.FAILED
        assert run.pr_number == 0
        assert run.error
        factory.assert_not_called()
