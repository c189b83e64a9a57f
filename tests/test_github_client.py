"""GitHub client tests"""

import base64
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.core.exceptions import GitHubAPIError
from app.infra.github.client import (
    GitHubClient,
    _since_param,
    _until_param,
    parse_repo_url,
)


def _response(payload, error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock(side_effect=error)
    return response


@pytest.fixture
def http_client() -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def github(http_client) -> GitHubClient:
    return GitHubClient(token="test-token", http_client=http_client)


def _encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestParseRepoUrl:
    """parse_repo_url function tests"""

    @pytest.mark.parametrize(
        "url,expected_owner,expected_repo",
        [
            ("https://github.com/user/my-repo", "user", "my-repo"),
            ("https://github.com/user/my-repo.git", "user", "my-repo"),
            ("https://github.com/user/my-repo/", "user", "my-repo"),
            ("https://github.com/org-name/repo_name", "org-name", "repo_name"),
            ("https://github.com/User123/Repo.Name", "User123", "Repo.Name"),
        ],
    )
    def test_valid_urls(self, url, expected_owner, expected_repo):
        """Valid GitHub URLs"""
        owner, repo = parse_repo_url(url)
        assert owner == expected_owner
        assert repo == expected_repo

    @pytest.mark.parametrize(
        "invalid_url",
        [
            "invalid-url",
            "https://gitlab.com/user/repo",
            "https://github.com/user",
            "",
        ],
    )
    def test_invalid_urls(self, invalid_url):
        """Invalid URLs raise ValueError"""
        with pytest.raises(ValueError, match="Invalid GitHub URL"):
            parse_repo_url(invalid_url)


class TestDateParams:
    """since/until parameter tests"""

    def test_since_start_of_day(self):
        assert _since_param(date(2024, 5, 1)) == "2024-05-01T00:00:00+00:00"

    def test_until_includes_whole_day(self):
        assert _until_param(date(2024, 5, 1)) == "2024-05-02T00:00:00+00:00"


class TestHeaders:
    """GitHubClient._get_headers tests"""

    def test_with_token(self, github):
        headers = github._get_headers()
        assert headers["Accept"] == "application/vnd.github.v3+json"
        assert headers["Authorization"] == "Bearer test-token"

    def test_without_token(self, http_client):
        headers = GitHubClient(token="", http_client=http_client)._get_headers()
        assert "Authorization" not in headers


class TestListCommits:
    """GitHubClient.list_commits tests"""

    @pytest.mark.asyncio
    async def test_success(self, github, http_client):
        """First message line, login before author name"""
        http_client.get.return_value = _response(
            [
                {
                    "sha": "abc123",
                    "author": {"login": "octocat"},
                    "commit": {
                        "message": "Add feature\n\nLong description",
                        "author": {"name": "Octo Cat", "date": "2024-05-01T10:00:00Z"},
                    },
                },
                {
                    "sha": "def456",
                    "author": None,
                    "commit": {
                        "message": "Fix typo",
                        "author": {"name": "Jane Doe", "date": "2024-05-02T10:00:00Z"},
                    },
                },
            ]
        )

        commits = await github.list_commits(
            "acme", "widgets", since=date(2024, 5, 1), until=date(2024, 5, 2)
        )

        assert [c.message for c in commits] == ["Add feature", "Fix typo"]
        assert [c.author for c in commits] == ["octocat", "Jane Doe"]
        params = http_client.get.call_args.kwargs["params"]
        assert params["since"] == "2024-05-01T00:00:00+00:00"
        assert params["until"] == "2024-05-03T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_per_page_capped(self, github, http_client):
        http_client.get.return_value = _response([])

        await github.list_commits("acme", "widgets", per_page=500)

        assert http_client.get.call_args.kwargs["params"]["per_page"] == 100

    @pytest.mark.asyncio
    async def test_error(self, github, http_client, create_http_error):
        """HTTP errors become GitHubAPIError"""
        http_client.get.return_value = _response([], create_http_error(403))

        with pytest.raises(GitHubAPIError):
            await github.list_commits("acme", "widgets")


class TestFetchCommitDetail:
    """GitHubClient.fetch_commit_detail tests"""

    @pytest.mark.asyncio
    async def test_success(self, github, http_client):
        http_client.get.return_value = _response(
            {
                "sha": "abc123",
                "author": {"login": "octocat"},
                "commit": {
                    "message": "Add feature",
                    "author": {"name": "Octo Cat", "date": "2024-05-01T10:00:00Z"},
                },
                "files": [
                    {"filename": "src/a.ts", "patch": "+a"},
                    {"filename": "logo.png"},
                ],
                "stats": {"additions": 5, "deletions": 1},
            }
        )

        detail = await github.fetch_commit_detail("acme", "widgets", "abc123")

        assert detail.author == "octocat"
        assert [f.patch for f in detail.files] == ["+a", None]
        assert detail.stats.additions == 5
        assert http_client.get.call_args.args[0].endswith("/repos/acme/widgets/commits/abc123")

    @pytest.mark.asyncio
    async def test_error_propagates(self, github, http_client, create_http_error):
        http_client.get.return_value = _response({}, create_http_error(404))

        with pytest.raises(httpx.HTTPStatusError):
            await github.fetch_commit_detail("acme", "widgets", "abc123")


class TestFetchReadme:
    """GitHubClient.fetch_readme tests"""

    @pytest.mark.asyncio
    async def test_success(self, github, http_client):
        http_client.get.return_value = _response({"content": _encode("# Widgets")})

        assert await github.fetch_readme("acme", "widgets") == "# Widgets"

    @pytest.mark.asyncio
    async def test_capped(self, github, http_client, monkeypatch):
        monkeypatch.setattr("app.infra.github.client.settings.readme_max_length_github", 4)
        http_client.get.return_value = _response({"content": _encode("# Widgets")})

        assert await github.fetch_readme("acme", "widgets") == "# Wi"

    @pytest.mark.asyncio
    async def test_missing(self, github, http_client, create_http_error):
        http_client.get.return_value = _response({}, create_http_error(404))

        assert await github.fetch_readme("acme", "widgets") is None

    @pytest.mark.asyncio
    async def test_network_error(self, github, http_client):
        http_client.get.side_effect = httpx.ConnectError("down")

        assert await github.fetch_readme("acme", "widgets") is None


class TestFetchRepoStructure:
    """GitHubClient.fetch_repo_structure tests"""

    @pytest.mark.asyncio
    async def test_success(self, github, http_client):
        http_client.get.return_value = _response(
            [
                {"name": "src", "type": "dir", "path": "src"},
                {"name": "package.json", "type": "file", "path": "package.json"},
            ]
        )

        entries = await github.fetch_repo_structure("acme", "widgets")

        assert [(e.name, e.type) for e in entries] == [("src", "dir"), ("package.json", "file")]

    @pytest.mark.asyncio
    async def test_error_is_empty(self, github, http_client, create_http_error):
        http_client.get.return_value = _response([], create_http_error(500))

        assert await github.fetch_repo_structure("acme", "widgets") == []


class TestFetchFileContent:
    """GitHubClient.fetch_file_content tests"""

    @pytest.mark.asyncio
    async def test_success(self, github, http_client):
        http_client.get.return_value = _response(
            {"encoding": "base64", "content": _encode('{"name": "widgets"}')}
        )

        assert await github.fetch_file_content("acme", "widgets", "package.json") == '{"name": "widgets"}'

    @pytest.mark.asyncio
    async def test_binary(self, github, http_client):
        """Undecodable content is skipped"""
        http_client.get.return_value = _response(
            {"encoding": "base64", "content": base64.b64encode(b"\xff\xfe\x00").decode("ascii")}
        )

        assert await github.fetch_file_content("acme", "widgets", "logo.png") is None

    @pytest.mark.asyncio
    async def test_missing(self, github, http_client, create_http_error):
        http_client.get.return_value = _response({}, create_http_error(404))

        assert await github.fetch_file_content("acme", "widgets", "package.json") is None


class TestAclose:
    """GitHubClient.aclose tests"""

    @pytest.mark.asyncio
    async def test_closes_http_client(self, github, http_client):
        await github.aclose()
        http_client.aclose.assert_awaited_once()
