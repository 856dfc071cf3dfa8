"""Posting review comments to a pull request."""

from collections.abc import Sequence

from github import Github, GithubException

from reviewthor.models.comment import ReviewComment
from reviewthor.utils.logging import get_logger

logger = get_logger("tools.comments")

# GitHub rejects reviews with more inline comments than this
MAX_COMMENTS_PER_REVIEW = 100


class CommentPostError(Exception):
    """Error raised when comment posting fails."""

    def __init__(self, message: str, posted: int = 0) -> None:
        """Initialize the CommentPostError.

        Args:
            message: Error message.
            posted: Number of comments already posted before the failure.
        """
        super().__init__(message)
        self.posted = posted


def batch_comments(
    comments: Sequence[ReviewComment],
    size: int = MAX_COMMENTS_PER_REVIEW,
) -> list[list[ReviewComment]]:
    """Split comments into contiguous batches of at most ``size``.

    Args:
        comments: Comments in posting order.
        size: Maximum batch size.

    Returns:
        Batches in input order.
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(comments[i : i + size]) for i in range(0, len(comments), size)]


def post_review_comments(
    client: Github,
    owner: str,
    repo: str,
    pr_number: int,
    comments: Sequence[ReviewComment],
) -> int:
    """Post inline comments as one or more COMMENT reviews.

    Batches are sent one after another in order. A failed batch stops the
    remaining ones; batches already sent stay posted.

    Args:
        client: Authenticated GitHub client.
        owner: Repository owner.
        repo: Repository name.
        pr_number: Pull request number.
        comments: Comments to post.

    Returns:
        Number of comments posted.

    Raises:
        CommentPostError: If a batch cannot be posted.
    """
    if not comments:
        return 0

    batches = batch_comments(comments)
    posted = 0

    try:
        pr = client.get_repo(f"{owner}/{repo}").get_pull(pr_number)
    except GithubException as e:
        raise CommentPostError(f"Failed to load PR #{pr_number}: {e}") from e

    for index, batch in enumerate(batches, start=1):
        try:
            # PyGithub accepts dicts for comments but types are declared incorrectly
            review = pr.create_review(
                event="COMMENT",
                comments=[c.to_github_review_comment() for c in batch],  # type: ignore[misc]
            )
        except GithubException as e:
            raise CommentPostError(
                f"Failed to post review batch {index}/{len(batches)}: {e}",
                posted=posted,
            ) from e

        posted += len(batch)
        logger.info(
            "Posted review batch",
            extra={
                "pr_number": pr_number,
                "repository": f"{owner}/{repo}",
                "batch": index,
                "batch_count": len(batches),
                "comment_count": len(batch),
                "review_id": review.id,
            },
        )

    return posted
