from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from app.domain.changelog.schemas.github import CommitRef, RepositoryFile


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tier(str, Enum):
    """Enrichment level of a changelog generation"""

    QUICK = "quick"
    BASIC = "basic"
    ENHANCED = "enhanced"


class ContextStatus(str, Enum):
    """Lifecycle of a project context"""

    PENDING = "pending"
    INDEXING = "indexing"
    READY = "ready"
    FAILED = "failed"


class Project(BaseModel):
    """Project tracked by the changelog service"""

    id: str
    name: str
    owner: str
    repo: str
    github_url: str


class CommitRecord(CommitRef):
    """Cached commit, keyed by (project_id, sha)"""

    project_id: str
    diff: str | None = None
    files_changed: list[str] | None = None
    additions: int | None = Field(default=None, ge=0)
    deletions: int | None = Field(default=None, ge=0)

    @property
    def is_complete(self) -> bool:
        return self.diff is not None


class TechStack(BaseModel):
    """Detected languages, frameworks and tools"""

    languages: set[str] = Field(default_factory=set)
    frameworks: set[str] = Field(default_factory=set)
    tools: set[str] = Field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not (self.languages or self.frameworks or self.tools)


class ProjectContext(BaseModel):
    """Repository metadata cached per project"""

    project_id: str
    readme: str | None = None
    structure: list[RepositoryFile] | None = None
    tech_stack: TechStack | None = None
    summary: str | None = None
    status: ContextStatus = ContextStatus.PENDING
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def validate_ready_fields(self):
        """A ready context always carries structure and tech stack"""
        if self.status == ContextStatus.READY and (
            self.structure is None or self.tech_stack is None
        ):
            raise ValueError("ready context requires structure and tech_stack")
        return self

    @property
    def has_content(self) -> bool:
        has_stack = self.tech_stack is not None and not self.tech_stack.is_empty
        return bool(self.readme or self.summary or has_stack or self.structure)


class GenerationOptions(BaseModel):
    """Caller intent for a changelog generation"""

    tier: Tier = Tier.ENHANCED
    previous_context: str | None = None


class GenerationResult(BaseModel):
    """Generated changelog entry"""

    summary: str
    content: str
    project_summary: str | None = None


class ProjectSummary(BaseModel):
    """Stored or regenerated project summary"""

    summary: str


class CommitAnalysis(BaseModel):
    """Aggregate statistics over a set of commits"""

    authors: list[str]
    total_files: int
    total_additions: int
    total_deletions: int


class TierLimits(BaseModel):
    """Prompt size and sampling bounds of one tier"""

    readme_limit: int = Field(ge=0)
    diff_limit: int = Field(ge=0)
    max_tokens: int = Field(gt=0)
    temperature: float = 0.7


class ComposedPrompt(BaseModel):
    """Prompt ready for the completion client"""

    tier: Tier
    system: str
    user: str
    temperature: float
    max_tokens: int
