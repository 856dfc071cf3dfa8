"""Pull request review pipeline.

One call reviews one pull request event end to end:

1. draft pull requests are skipped
2. the changed source files are listed and filtered by size and path
3. repository instructions are loaded and merged with the defaults
4. the file diffs are packed under the token budget and reviewed
5. comments above the severity floor are posted in batches

Failures after classification are normalized, logged with the correlation
ID and swallowed. Nothing is retried.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from reviewthor.agent.context import ContextAssembler
from reviewthor.agent.prompts import build_instructions
from reviewthor.agent.reviewer import ReviewOrchestrator
from reviewthor.agent.service import StrandsReviewService
from reviewthor.errors import normalize_error
from reviewthor.models.comment import ReviewComment
from reviewthor.models.context import ReviewRequest
from reviewthor.models.file_diff import FileDiff
from reviewthor.models.pull_request import PullRequest
from reviewthor.models.session import ReviewRun, ReviewState
from reviewthor.rules.instructions import InstructionProcessor
from reviewthor.tools.comments import post_review_comments
from reviewthor.tools.github import create_github_client, list_pr_files
from reviewthor.utils.glob import matches_any
from reviewthor.utils.logging import get_logger, with_correlation_id

if TYPE_CHECKING:
    from logging import LoggerAdapter

    from github import Github

    from reviewthor.agent.service import ReviewService
    from reviewthor.models.config import AppSettings
    from reviewthor.models.event import WebhookEvent

logger = get_logger("pipeline")

ClientFactory = Callable[[int, "AppSettings"], "Github"]
ServiceFactory = Callable[["AppSettings"], "ReviewService"]


def select_files(
    files: Sequence[FileDiff],
    settings: AppSettings,
    log: LoggerAdapter | None = None,
) -> list[FileDiff]:
    """Drop oversized and ignored files, then apply the file limit.

    Host order is preserved, so the files kept under the limit are the
    first ones GitHub reported.

    Args:
        files: Changed files in host order.
        settings: Settings with the size limit, ignored paths and file limit.
        log: Logger to report skipped files on.

    Returns:
        Files to review.
    """
    log = log or logger
    reviewable: list[FileDiff] = []

    for file in files:
        if file.changes > settings.max_file_size:
            log.info("Skipping large file", extra={"file": file.filename, "size": file.changes})
            continue

        if matches_any(file.filename, settings.ignored_paths):
            log.debug("Ignoring file based on pattern", extra={"file": file.filename})
            continue

        reviewable.append(file)

    limited = reviewable[: settings.max_files_per_review]
    if len(limited) < len(reviewable):
        log.warning(
            "File limit exceeded, reviewing subset",
            extra={"total_files": len(reviewable), "reviewing_files": len(limited)},
        )

    return limited


def filter_comments(
    comments: Sequence[ReviewComment],
    ignore_patterns: Sequence[str],
    limit: int,
) -> list[ReviewComment]:
    """Drop comments on ignored paths and cap the rest at ``limit``."""
    kept = [c for c in comments if not matches_any(c.path, ignore_patterns)]
    return kept[:limit]


def _payload_pr_number(payload: Mapping[str, Any]) -> int:
    pull_request = payload.get("pull_request")
    number = pull_request.get("number") if isinstance(pull_request, Mapping) else None
    # bool is an int subclass
    return number if isinstance(number, int) and not isinstance(number, bool) else 0


def handle_pull_request(
    event: WebhookEvent,
    correlation_id: str,
    settings: AppSettings,
    client_factory: ClientFactory = create_github_client,
    service_factory: ServiceFactory = StrandsReviewService.from_settings,
) -> ReviewRun:
    """Review the pull request carried by a webhook event.

    Never raises; a failed run is logged and returned in the FAILED state.

    Args:
        event: A classified pull request event.
        correlation_id: Per-delivery token included in every log record.
        settings: Process settings.
        client_factory: Builds the installation GitHub client.
        service_factory: Builds the review service.

    Returns:
        The finished ReviewRun.
    """
    log = with_correlation_id(logger, correlation_id)
    owner, repo = event.repository.owner, event.repository.name
    run = ReviewRun(
        correlation_id=correlation_id,
        repository=event.repository.full_name,
        pr_number=_payload_pr_number(event.payload),
    )

    log.info(
        "Processing pull request",
        extra={
            "event": event.kind.value,
            "repository": run.repository,
            "pr_number": run.pr_number,
            "action": event.action,
        },
    )

    try:
        pr = PullRequest.from_webhook_payload(event.payload)
        run.pr_number = pr.number

        if pr.draft:
            log.info("Skipping draft PR", extra={"pr_number": pr.number})
            run.transition_to(ReviewState.SKIPPED)
            return run

        run.transition_to(ReviewState.LOADING)
        client = client_factory(event.installation_id, settings)
        files = list_pr_files(client, owner, repo, pr.number, settings.source_extensions)

        selected = select_files(files, settings, log)
        if not selected:
            log.info("No files to review")
            run.transition_to(ReviewState.SKIPPED)
            return run

        config = InstructionProcessor(client).load_review_config(owner, repo)

        run.transition_to(ReviewState.REVIEWING)
        assembler = ContextAssembler(settings.token_budget)
        pr_context = assembler.build_pr_context(event.payload["pull_request"])
        packed = assembler.optimize_for_token_limit(
            [assembler.build_file_context(f.filename, f.patch or "") for f in selected],
            pr_context,
        )
        request = ReviewRequest(
            files=packed.files,
            pr_description=pr.body or "",
            repository=run.repository,
            token_count=packed.token_count,
            truncated=packed.truncated,
            instructions=build_instructions(config),
        )
        run.files_reviewed = len(packed.files)

        log.info("Starting AI analysis", extra={"files_count": len(packed.files)})
        orchestrator = ReviewOrchestrator(service_factory(settings))
        analysis = orchestrator.analyze_code(request)
        log.info(
            "AI analysis complete",
            extra={"issues_found": len(analysis.issues), "total": analysis.stats.total},
        )

        comments = filter_comments(
            orchestrator.generate_comments(analysis, config.severity),
            config.ignore_patterns,
            config.max_comments_per_pr,
        )

        run.transition_to(ReviewState.POSTING)
        if comments:
            log.info("Posting review comments", extra={"comments_count": len(comments)})
            run.comments_posted = post_review_comments(client, owner, repo, pr.number, comments)
        else:
            log.info("No comments to post")

        run.transition_to(ReviewState.COMPLETED)

    except Exception as e:
        error = normalize_error(e)
        run.fail(error.message)
        log.error("Error processing pull request", extra=error.to_log_fields())
        return run

    log.info(
        "Pull request processing complete",
        extra={"duration_ms": run.duration_ms, "comments_posted": run.comments_posted},
    )
    return run
