import asyncio
from typing import Literal

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from app.core.logging import get_logger
from app.domain.changelog.freshness import can_start_refresh, transition
from app.domain.changelog.schemas import (
    ContextStatus,
    Project,
    ProjectContext,
    RefreshState,
)
from app.domain.changelog.summary import ProjectSummaryGenerator
from app.domain.changelog.tech_stack import detect_tech_stack
from app.infra.github.client import GitHubClient
from app.infra.storage.base import BaseStorage

logger = get_logger(__name__)


class ContextRefresher:
    """Refetch repository context and move it through its status lifecycle"""

    def __init__(
        self,
        storage: BaseStorage,
        github: GitHubClient,
        summary_generator: ProjectSummaryGenerator,
    ):
        self._storage = storage
        self._github = github
        self._summary_generator = summary_generator
        self._workflow = self._create_workflow()
        self._tasks: set[asyncio.Task] = set()

    async def collect_node(self, state: RefreshState) -> RefreshState:
        """Collect README, top-level structure and tech stack"""
        project = state["project"]
        logger.info("collect_node started repo=%s/%s", project.owner, project.repo)

        readme, structure = await asyncio.gather(
            self._github.fetch_readme(project.owner, project.repo),
            self._github.fetch_repo_structure(project.owner, project.repo),
        )
        tech_stack = await detect_tech_stack(
            self._github, project.owner, project.repo, structure
        )

        logger.info(
            "collect_node done readme=%s entries=%d",
            readme is not None,
            len(structure),
        )
        return {
            **state,
            "readme": readme,
            "structure": structure,
            "tech_stack": tech_stack,
        }

    async def summarize_node(self, state: RefreshState) -> RefreshState:
        """Generate the project summary from collected context"""
        project = state["project"]
        logger.info("summarize_node started")

        draft = ProjectContext(
            project_id=project.id,
            readme=state.get("readme"),
            structure=state.get("structure"),
            tech_stack=state.get("tech_stack"),
        )
        summary = await self._summary_generator.summarize(draft, state.get("readme"))

        return {**state, "summary": summary}

    @staticmethod
    def should_summarize(state: RefreshState) -> Literal["summarize", "end"]:
        """Summarize when forced, or when no summary exists and a README does"""
        if state.get("force_summary"):
            return "summarize"
        if not state.get("existing_summary") and state.get("readme"):
            return "summarize"
        logger.info("should_summarize: summary kept")
        return "end"

    def _create_workflow(self) -> CompiledStateGraph:
        workflow = StateGraph(RefreshState)

        workflow.add_node("collect", self.collect_node)
        workflow.add_node("summarize", self.summarize_node)

        workflow.set_entry_point("collect")

        workflow.add_conditional_edges(
            "collect",
            self.should_summarize,
            {
                "summarize": "summarize",
                "end": END,
            },
        )
        workflow.add_edge("summarize", END)

        return workflow.compile()

    async def refresh(
        self,
        project: Project,
        explicit: bool = False,
        force_summary: bool = False,
    ) -> ProjectContext | None:
        """Refresh the project context

        Failures are recorded as the failed status rather than raised.

        Args:
            project: project to refresh
            explicit: caller-triggered retry, allowed to restart a failed context
            force_summary: regenerate the summary even when one exists

        Returns:
            the stored context, or None when the refresh did not start
        """
        context = await self._storage.get_context(project.id)
        if not can_start_refresh(context, explicit):
            logger.info(
                "context refresh skipped project_id=%s status=%s",
                project.id,
                context.status.value if context else None,
            )
            return None

        status = transition(context.status if context else None, ContextStatus.INDEXING)
        await self._storage.upsert_context(project.id, status=status)
        logger.info("context refresh started project_id=%s explicit=%s", project.id, explicit)

        try:
            final_state = await self._workflow.ainvoke(
                {
                    "project": project,
                    "force_summary": force_summary,
                    "existing_summary": context.summary if context else None,
                }
            )

            fields = {
                "readme": final_state.get("readme"),
                "structure": final_state.get("structure"),
                "tech_stack": final_state.get("tech_stack"),
                "status": transition(status, ContextStatus.READY),
            }
            if final_state.get("summary"):
                fields["summary"] = final_state["summary"]

            refreshed = await self._storage.upsert_context(project.id, **fields)

        except Exception as e:
            logger.error(
                "context refresh failed project_id=%s error=%s",
                project.id,
                e,
                exc_info=True,
            )
            return await self._storage.upsert_context(
                project.id, status=transition(status, ContextStatus.FAILED)
            )

        logger.info("context refresh done project_id=%s", project.id)
        return refreshed

    def schedule_refresh(self, project: Project) -> asyncio.Task:
        """Start a background refresh and return its task"""
        task = asyncio.create_task(self._refresh_in_background(project))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _refresh_in_background(self, project: Project) -> ProjectContext | None:
        try:
            return await self.refresh(project)
        except Exception as e:
            logger.error(
                "background refresh crashed project_id=%s error=%s",
                project.id,
                e,
                exc_info=True,
            )
            return None
