"""Commit cache tests"""

from unittest.mock import AsyncMock

import httpx
import pytest

from app.core.exceptions import GitHubAPIError
from app.domain.changelog.cache import CommitCache
from app.domain.changelog.schemas import CommitRecord


@pytest.fixture
def cache(storage, mock_github) -> CommitCache:
    return CommitCache(storage, mock_github)


class TestGetOrFetch:
    """CommitCache.get_or_fetch tests"""

    @pytest.mark.asyncio
    async def test_all_cached(self, cache, storage, project, mock_github, sample_commits, sample_record):
        """Fully cached commits make no upstream calls and keep input order"""
        second = sample_record.model_copy(update={"sha": sample_commits[1].sha, "author": "bob"})
        storage._commits[(project.id, second.sha)] = second
        storage._commits[(project.id, sample_record.sha)] = sample_record

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits, 5)

        assert [r.sha for r in records] == [c.sha for c in sample_commits]
        mock_github.fetch_commit_detail.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_fetch_degrades(
        self, cache, storage, project, mock_github, sample_commits, sample_record, create_http_error
    ):
        """One cached and one failing commit give two records, the second without a diff"""
        storage._commits[(project.id, sample_record.sha)] = sample_record
        mock_github.fetch_commit_detail.side_effect = create_http_error(500)

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits, 5)

        assert len(records) == 2
        assert records[0].diff == sample_record.diff
        assert records[1].sha == sample_commits[1].sha
        assert records[1].diff is None
        assert records[1].message == "Update dashboard layout"
        mock_github.fetch_commit_detail.assert_called_once_with("acme", "widgets", sample_commits[1].sha)

    @pytest.mark.asyncio
    async def test_fetch_stores_detail(self, cache, storage, project, mock_github, sample_commits, sample_detail):
        """Fetched detail is stored with joined patches and stats"""
        mock_github.fetch_commit_detail = AsyncMock(return_value=sample_detail)

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits[1:], 5)

        record = records[0]
        assert record.diff == "+<Grid />\n\n+.grid {}"
        assert record.files_changed == [
            "app/dashboard/page.tsx",
            "styles/grid.css",
            "public/logo.png",
        ]
        assert record.additions == 12
        assert record.deletions == 3
        assert await storage.find_commit(project.id, sample_detail.sha) == record

    @pytest.mark.asyncio
    async def test_incomplete_record_is_refetched(
        self, cache, storage, project, mock_github, sample_commits, sample_detail
    ):
        """A cached record without a diff is completed by a new fetch"""
        degraded = CommitRecord(project_id=project.id, **sample_commits[1].model_dump())
        storage._commits[(project.id, degraded.sha)] = degraded
        mock_github.fetch_commit_detail = AsyncMock(return_value=sample_detail)

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits[1:], 5)

        assert records[0].diff == "+<Grid />\n\n+.grid {}"
        assert records[0].message == "Update dashboard layout"

    @pytest.mark.asyncio
    async def test_limit(self, cache, project, mock_github, sample_commits, create_http_error):
        """Only the first limit commits are resolved"""
        mock_github.fetch_commit_detail.side_effect = create_http_error(404)

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits, 1)

        assert [r.sha for r in records] == [sample_commits[0].sha]
        assert mock_github.fetch_commit_detail.call_count == 1

    @pytest.mark.asyncio
    async def test_storage_failure_drops_commit(self, cache, storage, project, mock_github, sample_commits):
        """A commit that cannot be stored is left out"""
        mock_github.fetch_commit_detail.side_effect = httpx.ConnectError("down")
        storage.upsert_commit = AsyncMock(side_effect=RuntimeError("db down"))

        records = await cache.get_or_fetch(project.id, "acme", "widgets", sample_commits, 5)

        assert records == []


class TestGetOrFetchOne:
    """CommitCache.get_or_fetch_one tests"""

    @pytest.mark.asyncio
    async def test_cached(self, cache, storage, project, mock_github, sample_record):
        """Cached record with diff is returned as is"""
        storage._commits[(project.id, sample_record.sha)] = sample_record

        record = await cache.get_or_fetch_one(project.id, "acme", "widgets", sample_record.sha)

        assert record == sample_record
        mock_github.fetch_commit_detail.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_from_detail(self, cache, project, mock_github, sample_detail):
        """Unknown commit is created from upstream detail"""
        mock_github.fetch_commit_detail = AsyncMock(return_value=sample_detail)

        record = await cache.get_or_fetch_one(project.id, "acme", "widgets", sample_detail.sha)

        assert record.author == "bob"
        assert record.additions == 12
        assert record.diff is not None

    @pytest.mark.asyncio
    async def test_upstream_error(self, cache, project, mock_github, create_http_error):
        """Direct lookup failure raises GitHubAPIError"""
        mock_github.fetch_commit_detail.side_effect = create_http_error(404)

        with pytest.raises(GitHubAPIError):
            await cache.get_or_fetch_one(project.id, "acme", "widgets", "f" * 40)
