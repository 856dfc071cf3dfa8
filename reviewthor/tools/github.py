"""GitHub host operations used by the review pipeline."""

import base64

from github import Auth, Github, GithubException, GithubIntegration

from reviewthor.models.config import AppSettings
from reviewthor.models.file_diff import SOURCE_EXTENSIONS, FileDiff
from reviewthor.utils.logging import get_logger

logger = get_logger("tools.github")


class GitHubToolError(Exception):
    """Error raised by GitHub host operations."""

    pass


def create_github_client(installation_id: int, settings: AppSettings) -> Github:
    """Exchange the App credentials for an installation client.

    Args:
        installation_id: The GitHub App installation ID.
        settings: Settings holding the App ID and private key.

    Returns:
        Authenticated Github client.

    Raises:
        GitHubToolError: If authentication fails.
    """
    if not settings.github_app_id:
        raise GitHubToolError("Authentication failed: GITHUB_APP_ID is not configured")

    if not settings.github_private_key:
        raise GitHubToolError(
            "Authentication failed: GitHub private key not configured. "
            "Set GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH environment variable."
        )

    try:
        auth = Auth.AppAuth(settings.github_app_id, settings.github_private_key)
        gi = GithubIntegration(auth=auth)
        return gi.get_github_for_installation(installation_id)
    except Exception as e:
        raise GitHubToolError(f"Authentication failed: {e}") from e


def list_pr_files(
    client: Github,
    owner: str,
    repo: str,
    pr_number: int,
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS,
) -> list[FileDiff]:
    """List the source files changed in a pull request.

    Files are returned in the order GitHub reports them; files without one
    of ``extensions`` are dropped.

    Args:
        client: Authenticated GitHub client.
        owner: Repository owner.
        repo: Repository name.
        pr_number: Pull request number.
        extensions: File extensions to keep.

    Returns:
        List of FileDiff objects.

    Raises:
        GitHubToolError: If files cannot be fetched.
    """
    try:
        pr = client.get_repo(f"{owner}/{repo}").get_pull(pr_number)

        files = []
        for f in pr.get_files():
            file_diff = FileDiff(
                filename=f.filename,
                status=f.status,
                additions=f.additions,
                deletions=f.deletions,
                changes=f.changes,
                patch=getattr(f, "patch", None),
            )
            if file_diff.has_extension(extensions):
                files.append(file_diff)

    except GithubException as e:
        raise GitHubToolError(f"Failed to list PR files: {e}") from e

    logger.info(
        "Listed PR files",
        extra={
            "pr_number": pr_number,
            "repository": f"{owner}/{repo}",
            "file_count": len(files),
        },
    )

    return files


def get_file_content(
    client: Github,
    owner: str,
    repo: str,
    path: str,
    ref: str,
) -> str | None:
    """Get the content of a repository file at a ref.

    Args:
        client: Authenticated GitHub client.
        owner: Repository owner.
        repo: Repository name.
        path: Path to the file in the repository.
        ref: Git ref (branch, tag, or SHA).

    Returns:
        The decoded content, or None if the file does not exist or the
        path is a directory.

    Raises:
        GitHubToolError: If the file cannot be fetched.
    """
    try:
        content = client.get_repo(f"{owner}/{repo}").get_contents(path, ref=ref)
    except GithubException as e:
        if e.status == 404:
            return None
        raise GitHubToolError(f"Failed to get file content: {e}") from e

    if isinstance(content, list):
        return None

    if content.encoding == "base64":
        return base64.b64decode(content.content).decode("utf-8", errors="replace")
    return content.content
