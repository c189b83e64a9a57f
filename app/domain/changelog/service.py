import asyncio
from datetime import date

from app.core.config import settings
from app.core.context import bind_project, bind_request
from app.core.exceptions import ContextRefreshError, ProjectNotFoundError, ValidationError
from app.core.logging import get_logger
from app.domain.changelog.cache import CommitCache
from app.domain.changelog.composer import PromptComposer
from app.domain.changelog.freshness import can_start_refresh, is_usable, needs_refresh
from app.domain.changelog.orchestrator import GenerationOrchestrator
from app.domain.changelog.refresh import ContextRefresher
from app.domain.changelog.schemas import (
    CommitRecord,
    CommitRef,
    ContextStatus,
    GenerationOptions,
    GenerationResult,
    Project,
    ProjectContext,
    ProjectSummary,
    Tier,
)
from app.domain.changelog.summary import SUMMARY_NOT_AVAILABLE, ProjectSummaryGenerator
from app.infra.github.client import GitHubClient
from app.infra.llm.base import BaseLLMClient
from app.infra.storage.base import BaseStorage

logger = get_logger(__name__)


class ChangelogService:
    """Changelog generation and project context operations"""

    def __init__(
        self,
        storage: BaseStorage,
        github: GitHubClient,
        llm: BaseLLMClient,
        composer: PromptComposer | None = None,
        commit_limit: int | None = None,
        context_max_age_days: float | None = None,
    ):
        self._storage = storage
        self._github = github
        self._commit_limit = commit_limit or settings.commit_fetch_limit
        self._context_max_age_days = (
            context_max_age_days
            if context_max_age_days is not None
            else settings.context_max_age_days
        )

        self.cache = CommitCache(storage, github)
        self.refresher = ContextRefresher(storage, github, ProjectSummaryGenerator(llm))
        self.orchestrator = GenerationOrchestrator(llm, composer)

    async def _get_project(self, project_id: str) -> Project:
        project = await self._storage.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _resolve_context(self, project: Project) -> ProjectContext | None:
        """Return the context to generate with, refreshing it as needed

        An absent or empty context is refreshed before returning. A stale
        context that still has content is refreshed in the background.
        """
        context = await self._storage.get_context(project.id)
        if not needs_refresh(context, self._context_max_age_days):
            return context

        if not can_start_refresh(context):
            logger.info(
                "context refresh not started status=%s",
                context.status.value if context else None,
            )
            return context

        if not is_usable(context):
            refreshed = await self.refresher.refresh(project)
            return refreshed or context

        self.refresher.schedule_refresh(project)
        return context

    async def generate(
        self,
        commits: list[CommitRef],
        project_id: str | None = None,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate a changelog entry for commits

        Without a project the quick tier runs on the commit messages alone.
        A quick request with a project still fills the commit cache but
        leaves the project context untouched.

        Args:
            commits: commits in display order
            project_id: project the commits belong to
            options: requested tier and previous changelog text

        Returns:
            generated summary and body

        Raises:
            ValidationError: commits is empty
            ProjectNotFoundError: project_id is unknown
            LLMError: the completion failed or returned nothing
        """
        if not commits:
            raise ValidationError(detail="commits must not be empty")

        options = options or GenerationOptions()

        with bind_request(), bind_project(project_id):
            if project_id is None:
                return await self.orchestrator.generate(commits, None, options)

            project = await self._get_project(project_id)
            logger.info(
                "changelog requested commits=%d tier=%s",
                len(commits),
                options.tier.value,
            )

            fetch = self.cache.get_or_fetch(
                project.id,
                project.owner,
                project.repo,
                commits,
                self._commit_limit,
            )
            if options.tier == Tier.QUICK:
                records, context = await fetch, None
            else:
                records, context = await asyncio.gather(fetch, self._resolve_context(project))

            usable = context if is_usable(context) else None
            return await self.orchestrator.generate(
                records or commits[: self._commit_limit], usable, options
            )

    async def summarize_project(
        self, project_id: str, regenerate: bool = False
    ) -> ProjectSummary:
        """Return the project summary, optionally regenerating it

        Raises:
            ProjectNotFoundError: project_id is unknown
            ContextRefreshError: the regeneration failed or is already running
        """
        with bind_request(), bind_project(project_id):
            project = await self._get_project(project_id)

            if not regenerate:
                context = await self._storage.get_context(project.id)
                summary = context.summary if context and context.summary else None
                return ProjectSummary(summary=summary or SUMMARY_NOT_AVAILABLE)

            context = await self.refresher.refresh(project, explicit=True, force_summary=True)
            if context is None:
                raise ContextRefreshError(detail="refresh already in progress")
            if context.status == ContextStatus.FAILED:
                raise ContextRefreshError(detail=f"project_id={project_id}")

            return ProjectSummary(summary=context.summary or SUMMARY_NOT_AVAILABLE)

    async def get_commit(self, project_id: str, sha: str) -> CommitRecord:
        """Return one commit with its diff

        Raises:
            ProjectNotFoundError: project_id is unknown
            GitHubAPIError: the commit could not be fetched
        """
        with bind_request(), bind_project(project_id):
            project = await self._get_project(project_id)
            return await self.cache.get_or_fetch_one(
                project.id, project.owner, project.repo, sha
            )

    async def list_commits(
        self,
        project_id: str,
        since: date | None = None,
        until: date | None = None,
        page: int = 1,
        per_page: int = 100,
    ) -> list[CommitRef]:
        """List upstream commits of a project, both dates inclusive"""
        with bind_request(), bind_project(project_id):
            project = await self._get_project(project_id)
            return await self._github.list_commits(
                project.owner,
                project.repo,
                since=since,
                until=until,
                page=page,
                per_page=per_page,
            )

    async def update_project_summary(self, project_id: str, summary: str) -> ProjectContext:
        """Replace the stored project summary

        Raises:
            ValidationError: summary is empty
            ProjectNotFoundError: project_id is unknown
        """
        summary = (summary or "").strip()
        if not summary:
            raise ValidationError(detail="summary must not be empty")

        with bind_request(), bind_project(project_id):
            project = await self._get_project(project_id)
            context = await self._storage.upsert_context(project.id, summary=summary)
            logger.info("project summary updated chars=%d", len(summary))
            return context
