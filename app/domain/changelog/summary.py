from app.core.config import settings
from app.core.logging import get_logger
from app.domain.changelog.composer import format_tech_stack
from app.domain.changelog.prompts import PROJECT_SUMMARY_HUMAN, PROJECT_SUMMARY_SYSTEM
from app.domain.changelog.schemas import ProjectContext
from app.infra.llm.base import BaseLLMClient

logger = get_logger(__name__)

SUMMARY_NOT_AVAILABLE = "Project summary not available."
SUMMARY_UNAVAILABLE = "Unable to generate project summary."


class ProjectSummaryGenerator:
    """Standalone project description from repository context"""

    def __init__(
        self,
        llm: BaseLLMClient,
        structure_limit: int | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        self._llm = llm
        self._structure_limit = structure_limit or settings.summary_structure_limit
        self._max_tokens = max_tokens or settings.summary_max_tokens
        self._temperature = (
            temperature if temperature is not None else settings.summary_temperature
        )

    def build_prompt(self, context: ProjectContext, readme: str | None = None) -> str:
        readme_block = f"README Content:\n{readme}\n\n" if readme else ""

        key_files = ""
        if context.structure:
            names = [
                entry.name
                for entry in context.structure
                if not entry.type or entry.type == "file"
            ][: self._structure_limit]
            if names:
                key_files = f"Key Files:\n{', '.join(names)}\n\n"

        return PROJECT_SUMMARY_HUMAN.format(
            **format_tech_stack(context.tech_stack),
            readme=readme_block,
            key_files=key_files,
        )

    async def summarize(self, context: ProjectContext | None, readme: str | None = None) -> str:
        """Generate a 2-3 paragraph plain-text project summary

        Returns:
            summary text, or a placeholder when there is no context or the
            model returned nothing

        Raises:
            LLMError: the completion call failed
        """
        if context is None:
            return SUMMARY_NOT_AVAILABLE

        text = await self._llm.complete(
            PROJECT_SUMMARY_SYSTEM,
            self.build_prompt(context, readme),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            tags=["changelog", "project-summary"],
            session_id=context.project_id,
        )
        if not text:
            logger.warning("project summary empty project_id=%s", context.project_id)
            return SUMMARY_UNAVAILABLE

        logger.info("project summary generated project_id=%s chars=%d", context.project_id, len(text))
        return text
