from typing import TypedDict

from app.domain.changelog.schemas.base import Project, TechStack
from app.domain.changelog.schemas.github import RepositoryFile


class RefreshState(TypedDict, total=False):
    """LangGraph context refresh state"""

    project: Project
    force_summary: bool
    existing_summary: str | None
    readme: str | None
    structure: list[RepositoryFile]
    tech_stack: TechStack
    summary: str | None
