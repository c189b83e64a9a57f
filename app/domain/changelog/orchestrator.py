import re

from app.core.exceptions import LLMError
from app.core.logging import get_logger
from app.domain.changelog.composer import PromptComposer
from app.domain.changelog.schemas import (
    CommitRef,
    GenerationOptions,
    GenerationResult,
    ProjectContext,
    Tier,
)
from app.infra.llm.base import BaseLLMClient

logger = get_logger(__name__)

TITLE_PATTERN = re.compile(r"^#\s+(.+)$")
HEADING_PATTERN = re.compile(r"^(#{2,6})\s+\S")
FENCE_PATTERN = re.compile(r"^(```|~~~)")


def resolve_tier(requested: Tier, context: ProjectContext | None) -> Tier:
    """Tier actually run for a request

    Quick when requested or when there is no context to enrich with.
    """
    if requested == Tier.QUICK or context is None:
        return Tier.QUICK
    if requested == Tier.BASIC:
        return Tier.BASIC
    return Tier.ENHANCED


def first_line(text: str) -> str:
    """First non-empty line"""
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def extract_title(text: str) -> str:
    """Text of the first "# Title" heading, else the first line"""
    for line in text.splitlines():
        match = TITLE_PATTERN.match(line.strip())
        if match:
            return match.group(1).strip()
    return first_line(text)


def _heading_levels(lines: list[str]) -> list[int | None]:
    """Heading level of each line, None for body lines and fenced code"""
    levels: list[int | None] = []
    in_fence = False
    for line in lines:
        stripped = line.strip()
        if FENCE_PATTERN.match(stripped):
            in_fence = not in_fence
            levels.append(None)
            continue
        match = None if in_fence else HEADING_PATTERN.match(stripped)
        levels.append(len(match.group(1)) if match else None)
    return levels


def drop_empty_sections(text: str) -> str:
    """Remove sub-headings whose body is empty

    A section is empty when the next heading of the same or higher level, or
    the end of the text, follows with only blank lines in between. Lines
    inside ``` or ~~~ fences are body text, never headings.
    """
    lines = text.splitlines()
    levels = _heading_levels(lines)
    kept: list[str] = []

    for idx, line in enumerate(lines):
        level = levels[idx]
        if level is not None:
            has_body = False
            for following, next_level in zip(lines[idx + 1 :], levels[idx + 1 :]):
                if not following.strip():
                    continue
                has_body = next_level is None or next_level > level
                break
            if not has_body:
                continue
        kept.append(line)

    result = "\n".join(kept)
    return re.sub(r"\n{3,}", "\n\n", result).strip()


class GenerationOrchestrator:
    """Resolve a tier, compose its prompt and parse the completion"""

    def __init__(self, llm: BaseLLMClient, composer: PromptComposer | None = None):
        self._llm = llm
        self._composer = composer or PromptComposer()

    async def generate(
        self,
        commits: list[CommitRef],
        context: ProjectContext | None,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate a changelog entry

        Raises:
            LLMError: the completion failed or returned nothing
        """
        options = options or GenerationOptions()
        tier = resolve_tier(options.tier, context)

        prompt = self._composer.build(tier, commits, context, options.previous_context)
        logger.info(
            "changelog generation started tier=%s commits=%d prompt_chars=%d",
            tier.value,
            len(commits),
            len(prompt.user),
        )

        text = await self._llm.complete(
            prompt.system,
            prompt.user,
            temperature=prompt.temperature,
            max_tokens=prompt.max_tokens,
            tags=["changelog", tier.value],
            session_id=context.project_id if context else None,
        )
        if not text:
            raise LLMError(detail="empty completion")

        result = self._parse(tier, text, context)
        logger.info("changelog generation done tier=%s summary_chars=%d", tier.value, len(result.summary))
        return result

    def _parse(self, tier: Tier, text: str, context: ProjectContext | None) -> GenerationResult:
        content = drop_empty_sections(text)

        if tier == Tier.QUICK:
            return GenerationResult(summary=first_line(content), content=content)
        if tier == Tier.BASIC:
            return GenerationResult(summary=first_line(content), content=content)
        if tier == Tier.ENHANCED:
            return GenerationResult(
                summary=extract_title(content),
                content=content,
                project_summary=context.summary if context else None,
            )
        raise ValueError(f"Unknown tier: {tier}")
