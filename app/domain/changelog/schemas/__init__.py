from app.domain.changelog.schemas.base import (
    CommitAnalysis,
    CommitRecord,
    ComposedPrompt,
    ContextStatus,
    GenerationOptions,
    GenerationResult,
    Project,
    ProjectContext,
    ProjectSummary,
    TechStack,
    Tier,
    TierLimits,
    utcnow,
)
from app.domain.changelog.schemas.github import (
    CommitDetail,
    CommitFile,
    CommitRef,
    CommitStats,
    RepositoryFile,
)
from app.domain.changelog.schemas.state import RefreshState

__all__ = [
    "CommitRef",
    "CommitFile",
    "CommitStats",
    "CommitDetail",
    "RepositoryFile",
    "Tier",
    "ContextStatus",
    "Project",
    "CommitRecord",
    "TechStack",
    "ProjectContext",
    "ProjectSummary",
    "GenerationOptions",
    "GenerationResult",
    "CommitAnalysis",
    "TierLimits",
    "ComposedPrompt",
    "RefreshState",
    "utcnow",
]
