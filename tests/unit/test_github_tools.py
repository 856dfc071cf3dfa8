"""Unit tests for GitHub host operations."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from github import GithubException

from reviewthor.models.config import AppSettings
from reviewthor.models.file_diff import FileStatus
from reviewthor.tools.github import (
    GitHubToolError,
    create_github_client,
    get_file_content,
    list_pr_files,
)
from tests.fixtures.webhook_payloads import create_github_file


class TestCreateGitHubClient:
    """Tests for GitHub client creation."""

    def test_create_client_with_valid_credentials(self, settings: AppSettings) -> None:
        """Test creating client with valid credentials."""
        with (
            patch("reviewthor.tools.github.GithubIntegration") as mock_integration,
            patch("reviewthor.tools.github.Auth") as mock_auth,
        ):
            mock_github = MagicMock()
            mock_integration.return_value.get_github_for_installation.return_value = mock_github

            client = create_github_client(12345, settings)

        assert client is mock_github
        mock_auth.AppAuth.assert_called_once_with(123456, "test-key")
        mock_integration.return_value.get_github_for_installation.assert_called_once_with(12345)

    def test_create_client_missing_app_id(self) -> None:
        """Test that a missing App ID raises error."""
        settings = AppSettings(github_private_key="test-key")

        with pytest.raises(GitHubToolError, match="GITHUB_APP_ID"):
            create_github_client(12345, settings)

    def test_create_client_missing_private_key(self) -> None:
        """Test that a missing private key raises error."""
        settings = AppSettings(github_app_id=123456)

        with pytest.raises(GitHubToolError, match="private key"):
            create_github_client(12345, settings)

    def test_exchange_failure(self, settings: AppSettings) -> None:
        """Test that a failed credential exchange is an authentication error."""
        with patch("reviewthor.tools.github.GithubIntegration") as mock_integration:
            mock_integration.return_value.get_github_for_installation.side_effect = (
                GithubException(401, {"message": "Bad credentials"}, {})
            )

            with pytest.raises(GitHubToolError, match="^Authentication failed"):
                create_github_client(12345, settings)


class TestListPrFiles:
    """Tests for list_pr_files tool."""

    def test_list_files_success(self) -> None:
        """Test listing source files in host order."""
        mock_client = MagicMock()
        mock_pr = mock_client.get_repo.return_value.get_pull.return_value
        mock_pr.get_files.return_value = [
            create_github_file("src/b.ts", additions=3, deletions=1),
            create_github_file("README.md"),
            create_github_file("src/a.js", patch=None, status="added"),
        ]

        files = list_pr_files(mock_client, "owner", "repo", 42)

        assert [f.filename for f in files] == ["src/b.ts", "src/a.js"]
        assert files[0].changes == 4
        assert files[1].patch is None
        assert files[1].status == FileStatus.ADDED
        mock_client.get_repo.assert_called_once_with("owner/repo")
        mock_client.get_repo.return_value.get_pull.assert_called_once_with(42)

    def test_custom_extensions(self) -> None:
        """Test that the extension filter can be replaced."""
        mock_client = MagicMock()
        mock_pr = mock_client.get_repo.return_value.get_pull.return_value
        mock_pr.get_files.return_value = [create_github_file("app.py"), create_github_file("a.js")]

        files = list_pr_files(mock_client, "owner", "repo", 42, extensions=(".py",))

        assert [f.filename for f in files] == ["app.py"]

    def test_list_files_empty_pr(self) -> None:
        """Test a PR without files."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_pull.return_value.get_files.return_value = []

        assert list_pr_files(mock_client, "owner", "repo", 42) == []

    def test_list_files_api_error(self) -> None:
        """Test that API errors are wrapped."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_pull.side_effect = GithubException(
            404, {"message": "Not Found"}, {}
        )

        with pytest.raises(GitHubToolError, match="Failed to list PR files"):
            list_pr_files(mock_client, "owner", "repo", 42)


class TestGetFileContent:
    """Tests for get_file_content tool."""

    def test_get_content_success(self) -> None:
        """Test decoding base64 file content."""
        mock_client = MagicMock()
        mock_content = MagicMock()
        mock_content.content = base64.b64encode(b"## Focus Areas\n- Tests").decode()
        mock_content.encoding = "base64"
        mock_client.get_repo.return_value.get_contents.return_value = mock_content

        result = get_file_content(mock_client, "owner", "repo", ".reviewthor.md", "HEAD")

        assert result == "## Focus Areas\n- Tests"
        mock_client.get_repo.return_value.get_contents.assert_called_once_with(
            ".reviewthor.md", ref="HEAD"
        )

    def test_get_content_invalid_utf8(self) -> None:
        """Test that undecodable bytes are replaced instead of raising."""
        mock_client = MagicMock()
        mock_content = MagicMock()
        mock_content.content = base64.b64encode(b"## Severity\nerror\n# caf\xe9\n").decode()
        mock_content.encoding = "base64"
        mock_client.get_repo.return_value.get_contents.return_value = mock_content

        result = get_file_content(mock_client, "owner", "repo", ".reviewthor.md", "HEAD")

        assert result == "## Severity\nerror\n# caf\ufffd\n"

    def test_get_content_file_not_found(self) -> None:
        """Test that a missing file is None."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_contents.side_effect = GithubException(
            404, {"message": "Not Found"}, {}
        )

        assert get_file_content(mock_client, "owner", "repo", "missing.md", "HEAD") is None

    def test_get_content_directory(self) -> None:
        """Test that a directory listing is None."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_contents.return_value = [MagicMock(), MagicMock()]

        assert get_file_content(mock_client, "owner", "repo", "src", "HEAD") is None

    def test_get_content_server_error(self) -> None:
        """Test that other errors are wrapped."""
        mock_client = MagicMock()
        mock_client.get_repo.return_value.get_contents.side_effect = GithubException(
            502, {"message": "Bad Gateway"}, {}
        )

        with pytest.raises(GitHubToolError, match="Failed to get file content"):
            get_file_content(mock_client, "owner", "repo", "a.md", "HEAD")
