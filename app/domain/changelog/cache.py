import asyncio

import httpx

from app.core.exceptions import GitHubAPIError
from app.core.logging import get_logger
from app.domain.changelog.schemas import CommitDetail, CommitRecord, CommitRef
from app.infra.github.client import GitHubClient
from app.infra.storage.base import BaseStorage

logger = get_logger(__name__)


def _detail_fields(detail: CommitDetail) -> dict:
    """diff, files and stats derived from upstream detail"""
    return {
        "diff": "\n\n".join(f.patch for f in detail.files if f.patch),
        "files_changed": [f.filename for f in detail.files],
        "additions": detail.stats.additions,
        "deletions": detail.stats.deletions,
    }


class CommitCache:
    """Local cache of upstream commit detail keyed by (project_id, sha)"""

    def __init__(self, storage: BaseStorage, github: GitHubClient):
        self._storage = storage
        self._github = github

    async def get_or_fetch(
        self,
        project_id: str,
        owner: str,
        repo: str,
        commits: list[CommitRef],
        limit: int,
    ) -> list[CommitRecord]:
        """Return detailed records for the first limit commits

        Commits already cached with a diff are served from storage; the rest
        are fetched concurrently. A failed fetch stores a message-only record
        instead of failing the batch.

        Args:
            project_id: project id
            owner: repository owner
            repo: repository name
            commits: commits in display order
            limit: maximum number of commits to return

        Returns:
            records in input order; commits that could not be stored are dropped
        """
        selected = commits[:limit]
        shas = [c.sha for c in selected]

        cached = await self._storage.find_commits(project_id, shas, with_diff=True)
        records: dict[str, CommitRecord] = {r.sha: r for r in cached}

        to_fetch: dict[str, CommitRef] = {}
        for commit in selected:
            if commit.sha not in records:
                to_fetch.setdefault(commit.sha, commit)

        if to_fetch:
            fetched = await asyncio.gather(
                *[
                    self._fetch_and_store(project_id, owner, repo, commit)
                    for commit in to_fetch.values()
                ]
            )
            for record in fetched:
                if record is not None:
                    records[record.sha] = record

        logger.info(
            "commit cache resolved requested=%d cached=%d fetched=%d",
            len(selected),
            len(cached),
            len(to_fetch),
        )
        return [records[sha] for sha in shas if sha in records]

    async def _fetch_and_store(
        self, project_id: str, owner: str, repo: str, commit: CommitRef
    ) -> CommitRecord | None:
        base = CommitRecord(
            project_id=project_id,
            sha=commit.sha,
            message=commit.message,
            author=commit.author,
            date=commit.date,
        )

        try:
            detail = await self._github.fetch_commit_detail(owner, repo, commit.sha)
        except Exception as e:
            logger.warning(
                "commit detail fetch failed, storing without diff sha=%s error=%s",
                commit.sha[:7],
                type(e).__name__,
            )
            return await self._upsert(base, {})

        fields = _detail_fields(detail)
        return await self._upsert(base.model_copy(update=fields), fields)

    async def _upsert(self, create: CommitRecord, update: dict) -> CommitRecord | None:
        try:
            return await self._storage.upsert_commit(create, update)
        except Exception as e:
            logger.error("commit upsert failed sha=%s error=%s", create.sha[:7], e)
            return None

    async def get_or_fetch_one(
        self, project_id: str, owner: str, repo: str, sha: str
    ) -> CommitRecord:
        """Return one commit with its diff, fetching it when needed

        Raises:
            GitHubAPIError: the commit is not cached and the fetch failed
        """
        existing = await self._storage.find_commit(project_id, sha)
        if existing is not None and existing.diff is not None:
            return existing

        try:
            detail = await self._github.fetch_commit_detail(owner, repo, sha)
        except httpx.HTTPError as e:
            raise GitHubAPIError(detail=f"{type(e).__name__}: {e}") from e

        fields = _detail_fields(detail)
        create = CommitRecord(
            project_id=project_id,
            sha=sha,
            message=detail.message,
            author=detail.author,
            date=detail.date,
            **fields,
        )
        return await self._storage.upsert_commit(create, fields)
