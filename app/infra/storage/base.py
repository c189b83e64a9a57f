from abc import ABC, abstractmethod
from typing import Any

from app.domain.changelog.schemas import CommitRecord, Project, ProjectContext


class BaseStorage(ABC):
    """Keyed storage of projects, commits and project contexts

    Upserts are keyed by (project_id, sha) for commits and project_id for
    contexts; concurrent writers converge on the same record.
    """

    @abstractmethod
    async def get_project(self, project_id: str) -> Project | None:
        """Return a project by id"""
        pass

    @abstractmethod
    async def find_commit(self, project_id: str, sha: str) -> CommitRecord | None:
        """Return a cached commit"""
        pass

    @abstractmethod
    async def find_commits(
        self, project_id: str, shas: list[str], with_diff: bool = False
    ) -> list[CommitRecord]:
        """Return cached commits among shas, optionally only complete ones"""
        pass

    @abstractmethod
    async def upsert_commit(
        self, create: CommitRecord, update: dict[str, Any]
    ) -> CommitRecord:
        """Create the record, or apply update to the existing one"""
        pass

    @abstractmethod
    async def get_context(self, project_id: str) -> ProjectContext | None:
        """Return the project context"""
        pass

    @abstractmethod
    async def upsert_context(self, project_id: str, **fields: Any) -> ProjectContext:
        """Merge fields into the project context, creating it when absent"""
        pass
