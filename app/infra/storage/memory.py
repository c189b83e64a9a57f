import uuid
from typing import Any

from app.core.logging import get_logger
from app.domain.changelog.schemas import CommitRecord, Project, ProjectContext, utcnow
from app.infra.github.client import parse_repo_url
from app.infra.storage.base import BaseStorage

logger = get_logger(__name__)


class InMemoryStorage(BaseStorage):
    """Process-local storage for tests and local runs

    Every operation completes without awaiting, so each upsert is atomic with
    respect to other coroutines on the same event loop.
    """

    def __init__(self):
        self._projects: dict[str, Project] = {}
        self._commits: dict[tuple[str, str], CommitRecord] = {}
        self._contexts: dict[str, ProjectContext] = {}

    def add_project(self, github_url: str, name: str | None = None) -> Project:
        """Register a project from its GitHub URL"""
        owner, repo = parse_repo_url(github_url)
        project = Project(
            id=uuid.uuid4().hex,
            name=name or f"{owner}/{repo}",
            owner=owner,
            repo=repo,
            github_url=f"https://github.com/{owner}/{repo}",
        )
        self._projects[project.id] = project
        logger.info("project registered id=%s repo=%s/%s", project.id, owner, repo)
        return project

    async def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    async def find_commit(self, project_id: str, sha: str) -> CommitRecord | None:
        return self._commits.get((project_id, sha))

    async def find_commits(
        self, project_id: str, shas: list[str], with_diff: bool = False
    ) -> list[CommitRecord]:
        records = []
        for sha in shas:
            record = self._commits.get((project_id, sha))
            if record is None:
                continue
            if with_diff and record.diff is None:
                continue
            records.append(record)
        return records

    async def upsert_commit(
        self, create: CommitRecord, update: dict[str, Any]
    ) -> CommitRecord:
        key = (create.project_id, create.sha)
        existing = self._commits.get(key)
        if existing is None:
            record = create
        else:
            record = CommitRecord.model_validate({**existing.model_dump(), **update})
        self._commits[key] = record
        return record

    async def get_context(self, project_id: str) -> ProjectContext | None:
        return self._contexts.get(project_id)

    async def upsert_context(self, project_id: str, **fields: Any) -> ProjectContext:
        existing = self._contexts.get(project_id)
        base = existing.model_dump() if existing else {"project_id": project_id}
        context = ProjectContext.model_validate(
            {**base, **fields, "project_id": project_id, "updated_at": utcnow()}
        )
        self._contexts[project_id] = context
        return context
