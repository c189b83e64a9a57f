"""Shared test fixtures"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.domain.changelog.schemas import (
    CommitDetail,
    CommitFile,
    CommitRecord,
    CommitRef,
    CommitStats,
    ContextStatus,
    ProjectContext,
    RepositoryFile,
    TechStack,
)
from app.infra.storage.memory import InMemoryStorage


@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty in-memory storage"""
    return InMemoryStorage()


@pytest.fixture
def project(storage):
    """Project registered in storage"""
    return storage.add_project("https://github.com/acme/widgets")


@pytest.fixture
def mock_github():
    """GitHub client mock with every fetch as AsyncMock"""
    github = MagicMock()
    github.fetch_commit_detail = AsyncMock()
    github.fetch_readme = AsyncMock(return_value="# Widgets\n\nA widget library.")
    github.fetch_repo_structure = AsyncMock(
        return_value=[
            RepositoryFile(name="package.json", type="file", path="package.json"),
            RepositoryFile(name="src", type="dir", path="src"),
        ]
    )
    github.fetch_file_content = AsyncMock(
        return_value='{"dependencies": {"react": "^18.0.0"}}'
    )
    github.list_commits = AsyncMock(return_value=[])
    return github


@pytest.fixture
def mock_llm():
    """LLM client mock returning a fixed completion"""
    llm = MagicMock()
    llm.complete = AsyncMock(return_value="# Release\n\n## What's new\n- Things")
    return llm


@pytest.fixture
def commit_date() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_commits(commit_date) -> list[CommitRef]:
    """Two commits without fix-like messages"""
    return [
        CommitRef(sha="a" * 40, message="Add export button", author="alice", date=commit_date),
        CommitRef(sha="b" * 40, message="Update dashboard layout", author="bob", date=commit_date),
    ]


@pytest.fixture
def sample_record(project, commit_date) -> CommitRecord:
    """Fully cached commit"""
    return CommitRecord(
        project_id=project.id,
        sha="a" * 40,
        message="Add export button",
        author="alice",
        date=commit_date,
        diff="@@ -1 +1 @@\n-old\n+new",
        files_changed=["src/components/Export/Button.tsx"],
        additions=1,
        deletions=1,
    )


@pytest.fixture
def sample_detail(commit_date) -> CommitDetail:
    """Upstream commit detail"""
    return CommitDetail(
        sha="b" * 40,
        message="Update dashboard layout",
        author="bob",
        date=commit_date,
        files=[
            CommitFile(filename="app/dashboard/page.tsx", patch="+<Grid />"),
            CommitFile(filename="styles/grid.css", patch="+.grid {}"),
            CommitFile(filename="public/logo.png", patch=None),
        ],
        stats=CommitStats(additions=12, deletions=3),
    )


@pytest.fixture
def ready_context(project) -> ProjectContext:
    """Fresh ready context with summary and README"""
    return ProjectContext(
        project_id=project.id,
        readme="# Widgets\n\nA widget library.",
        structure=[RepositoryFile(name="package.json", type="file", path="package.json")],
        tech_stack=TechStack(languages={"JavaScript"}, frameworks={"React"}),
        summary="Widgets is a React component library.",
        status=ContextStatus.READY,
    )


@pytest.fixture
def create_http_error():
    """HTTPStatusError factory"""

    def _create(status_code: int, message: str = "Error"):
        return httpx.HTTPStatusError(
            message,
            request=httpx.Request("GET", "https://api.github.com"),
            response=httpx.Response(status_code),
        )

    return _create
