import asyncio
import base64
import re
from datetime import date, datetime, time, timedelta, timezone

import httpx

from app.core.config import settings
from app.core.exceptions import GitHubAPIError
from app.core.logging import get_logger
from app.domain.changelog.schemas import (
    CommitDetail,
    CommitFile,
    CommitRef,
    CommitStats,
    RepositoryFile,
)

logger = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"

GITHUB_URL_PATTERN = re.compile(r"github\.com/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)")


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Extract owner and repo from a GitHub URL

    Args:
        repo_url: GitHub repository URL

    Returns:
        (owner, repo) tuple

    Raises:
        ValueError: not a GitHub repository URL
    """
    match = GITHUB_URL_PATTERN.search(repo_url)
    if not match:
        raise ValueError(f"Invalid GitHub URL: {repo_url}")
    owner = match.group(1)
    repo = match.group(2).removesuffix(".git")
    return owner, repo


def _since_param(since: date) -> str:
    """since is inclusive from the start of the day"""
    return datetime.combine(since, time.min, tzinfo=timezone.utc).isoformat()


def _until_param(until: date) -> str:
    """until is exclusive upstream, so move it to the start of the next day"""
    next_day = until + timedelta(days=1)
    return datetime.combine(next_day, time.min, tzinfo=timezone.utc).isoformat()


def _commit_author(data: dict) -> str:
    """GitHub login when the commit is linked to an account, else the git author name"""
    account = data.get("author") or {}
    return account.get("login") or data["commit"]["author"]["name"]


class GitHubClient:
    """Async GitHub REST client

    Network errors of readme, structure and file lookups degrade to empty
    values; commit lookups raise so that callers decide how to degrade.
    """

    def __init__(
        self,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        max_concurrent_requests: int | None = None,
    ):
        self._token = token if token is not None else settings.github_token
        self._client = http_client or httpx.AsyncClient(timeout=settings.github_timeout)
        self._semaphore = asyncio.Semaphore(
            max_concurrent_requests or settings.github_max_concurrent_requests
        )

    def _get_headers(self) -> dict[str, str]:
        """GitHub API request headers"""
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        async with self._semaphore:
            response = await self._client.get(url, headers=self._get_headers(), params=params)
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        """Close the underlying httpx client"""
        await self._client.aclose()

    async def list_commits(
        self,
        owner: str,
        repo: str,
        since: date | None = None,
        until: date | None = None,
        page: int = 1,
        per_page: int = 100,
    ) -> list[CommitRef]:
        """List repository commits in a date range

        Args:
            owner: repository owner
            repo: repository name
            since: first day to include
            until: last day to include
            page: result page
            per_page: commits per page, at most 100

        Returns:
            commits with the first line of their message

        Raises:
            GitHubAPIError: the GitHub API call failed
        """
        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/commits"
        params: dict[str, str | int] = {"page": page, "per_page": min(per_page, 100)}
        if since:
            params["since"] = _since_param(since)
        if until:
            params["until"] = _until_param(until)

        try:
            response = await self._get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(
                "commit list failed repo=%s/%s error=%s", owner, repo, type(e).__name__
            )
            raise GitHubAPIError(detail=str(e)) from e

        commits = [
            CommitRef(
                sha=item["sha"],
                message=item["commit"]["message"].split("\n")[0],
                author=_commit_author(item),
                date=item["commit"]["author"]["date"],
            )
            for item in response.json()
        ]

        logger.info("commit list fetched repo=%s/%s count=%d", owner, repo, len(commits))
        return commits

    async def fetch_commit_detail(self, owner: str, repo: str, sha: str) -> CommitDetail:
        """Fetch a single commit with its files and stats

        Raises:
            httpx.HTTPError: the GitHub API call failed
        """
        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/commits/{sha}"

        response = await self._get(url)
        data = response.json()

        stats = data.get("stats") or {}
        detail = CommitDetail(
            sha=data["sha"],
            message=data["commit"]["message"],
            author=_commit_author(data),
            date=data["commit"]["author"]["date"],
            files=[
                CommitFile(filename=f["filename"], patch=f.get("patch"))
                for f in data.get("files", [])
            ],
            stats=CommitStats(
                additions=stats.get("additions", 0),
                deletions=stats.get("deletions", 0),
            ),
        )

        logger.info("commit detail fetched repo=%s/%s sha=%s", owner, repo, sha[:7])
        return detail

    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        """Fetch the repository README

        Returns:
            README text capped at the configured length, None when missing
        """
        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/readme"

        try:
            response = await self._get(url)
            data = response.json()
            content = base64.b64decode(data["content"]).decode("utf-8")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info("readme missing repo=%s/%s", owner, repo)
            else:
                logger.warning(
                    "readme fetch failed repo=%s/%s status=%d",
                    owner,
                    repo,
                    e.response.status_code,
                )
            return None
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("readme fetch failed repo=%s/%s error=%s", owner, repo, type(e).__name__)
            return None

        logger.info("readme fetched repo=%s/%s", owner, repo)
        return content[: settings.readme_max_length_github]

    async def fetch_repo_structure(
        self, owner: str, repo: str, path: str = ""
    ) -> list[RepositoryFile]:
        """List one directory of the repository

        Returns:
            directory entries, empty on failure
        """
        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/contents/{path}"

        try:
            response = await self._get(url)
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(
                "structure fetch failed repo=%s/%s path=%s error=%s",
                owner,
                repo,
                path,
                type(e).__name__,
            )
            return []

        if not isinstance(data, list):
            return []

        entries = [
            RepositoryFile(name=item["name"], type=item["type"], path=item["path"])
            for item in data
        ]
        logger.info("structure fetched repo=%s/%s entries=%d", owner, repo, len(entries))
        return entries

    async def fetch_file_content(self, owner: str, repo: str, path: str) -> str | None:
        """Fetch a file's text

        Returns:
            file content, None when missing, binary or on failure
        """
        url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/contents/{path}"

        try:
            response = await self._get(url)
            data = response.json()

            if data.get("encoding") != "base64":
                return None

            content = base64.b64decode(data["content"]).decode("utf-8")
            logger.info("file fetched repo=%s/%s path=%s", owner, repo, path)
            return content
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.info("file missing repo=%s/%s path=%s", owner, repo, path)
                return None
            logger.warning(
                "file fetch failed repo=%s/%s path=%s error=%s", owner, repo, path, type(e).__name__
            )
            return None
        except httpx.HTTPError as e:
            logger.warning(
                "file fetch failed repo=%s/%s path=%s error=%s", owner, repo, path, type(e).__name__
            )
            return None
        except UnicodeDecodeError:
            logger.info("binary file skipped repo=%s/%s path=%s", owner, repo, path)
            return None
