"""
Tier-specific prompt construction

Per-commit diff text is truncated independently of the number of commits,
so the prompt grows linearly with the commit limit and never with the size
of the underlying changes.
"""

import re

from pydantic import BaseModel, Field

from app.core.config import settings
from app.domain.changelog import categorizer
from app.domain.changelog.prompts import (
    BASIC_HUMAN,
    BASIC_SYSTEM,
    CONTEXT_SECTION,
    ENHANCED_HUMAN,
    ENHANCED_SYSTEM,
    QUICK_BUG_FIX_SECTION,
    QUICK_HUMAN,
    QUICK_SECTIONS,
    QUICK_SYSTEM,
)
from app.domain.changelog.schemas import (
    CommitAnalysis,
    CommitRef,
    ComposedPrompt,
    ProjectContext,
    TechStack,
    Tier,
    TierLimits,
)

TRUNCATION_MARKER = "...[truncated]"
README_ELLIPSIS = "..."
UNKNOWN = "Unknown"

FIX_PATTERN = re.compile(r"\b(fix(es|ed)?|bug|hotfix|patch(es|ed)?|resolve[sd]?)\b", re.IGNORECASE)


class PromptLimits(BaseModel):
    """Prompt size bounds for every tier"""

    quick: TierLimits
    basic: TierLimits
    enhanced: TierLimits
    max_files_per_commit: int = Field(default=50, gt=0)

    @classmethod
    def from_settings(cls) -> "PromptLimits":
        return cls(
            quick=TierLimits(
                readme_limit=0,
                diff_limit=0,
                max_tokens=settings.quick_max_tokens,
                temperature=settings.changelog_temperature,
            ),
            basic=TierLimits(
                readme_limit=settings.basic_readme_limit,
                diff_limit=settings.basic_diff_limit,
                max_tokens=settings.basic_max_tokens,
                temperature=settings.changelog_temperature,
            ),
            enhanced=TierLimits(
                readme_limit=settings.enhanced_readme_limit,
                diff_limit=settings.enhanced_diff_limit,
                max_tokens=settings.enhanced_max_tokens,
                temperature=settings.changelog_temperature,
            ),
            max_files_per_commit=settings.max_files_per_commit,
        )

    def for_tier(self, tier: Tier) -> TierLimits:
        return getattr(self, tier.value)


def truncate(text: str, limit: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut text to limit characters and append marker when something was cut"""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def is_fix_like(message: str) -> bool:
    return bool(FIX_PATTERN.search(message))


def analyze_commits(commits: list[CommitRef]) -> CommitAnalysis:
    """Author set, unique file count and line totals"""
    authors: dict[str, None] = {}
    files: set[str] = set()
    additions = 0
    deletions = 0

    for commit in commits:
        authors.setdefault(commit.author, None)
        files.update(getattr(commit, "files_changed", None) or [])
        additions += getattr(commit, "additions", None) or 0
        deletions += getattr(commit, "deletions", None) or 0

    return CommitAnalysis(
        authors=list(authors),
        total_files=len(files),
        total_additions=additions,
        total_deletions=deletions,
    )


def _join_or_unknown(values: set[str] | None) -> str:
    return ", ".join(sorted(values)) if values else UNKNOWN


def format_tech_stack(tech_stack: TechStack | None) -> dict[str, str]:
    """Placeholders for the Technologies/Frameworks/Tools lines"""
    tech_stack = tech_stack or TechStack()
    return {
        "languages": _join_or_unknown(tech_stack.languages),
        "frameworks": _join_or_unknown(tech_stack.frameworks),
        "tools": _join_or_unknown(tech_stack.tools),
    }


def _previous_context_block(label: str, previous: str | None) -> str:
    return f"{label}:\n{previous}\n\n" if previous else ""


class PromptComposer:
    """Build the prompt of each tier"""

    def __init__(self, limits: PromptLimits | None = None):
        self.limits = limits or PromptLimits.from_settings()

    def build(
        self,
        tier: Tier,
        commits: list[CommitRef],
        context: ProjectContext | None = None,
        previous_context: str | None = None,
    ) -> ComposedPrompt:
        """Compose the prompt of the given tier

        Raises:
            ValueError: basic or enhanced tier without a project context
        """
        if tier == Tier.QUICK:
            system, user = QUICK_SYSTEM, self._quick_prompt(commits, previous_context)
        elif context is None:
            raise ValueError(f"{tier.value} tier requires a project context")
        elif tier == Tier.BASIC:
            system, user = BASIC_SYSTEM, self._basic_prompt(commits, context, previous_context)
        elif tier == Tier.ENHANCED:
            system, user = (
                ENHANCED_SYSTEM,
                self._enhanced_prompt(commits, context, previous_context),
            )
        else:
            raise ValueError(f"Unknown tier: {tier}")

        limits = self.limits.for_tier(tier)
        return ComposedPrompt(
            tier=tier,
            system=system,
            user=user,
            temperature=limits.temperature,
            max_tokens=limits.max_tokens,
        )

    def _quick_prompt(self, commits: list[CommitRef], previous_context: str | None) -> str:
        commit_messages = "\n".join(f"- {c.message} (by {c.author})" for c in commits)

        sections = QUICK_SECTIONS
        if any(is_fix_like(c.message) for c in commits):
            sections += QUICK_BUG_FIX_SECTION

        return QUICK_HUMAN.format(
            previous_context=_previous_context_block("Previous context", previous_context),
            commit_messages=commit_messages,
            sections=sections,
        )

    def _context_section(self, context: ProjectContext, readme_limit: int) -> str:
        readme = ""
        if context.readme and readme_limit > 0:
            readme = f"\nREADME Summary:\n{truncate(context.readme, readme_limit, README_ELLIPSIS)}\n"
        return CONTEXT_SECTION.format(**format_tech_stack(context.tech_stack), readme=readme) + "\n"

    def _files_line(self, files: list[str]) -> str:
        cap = self.limits.max_files_per_commit
        line = ", ".join(files[:cap])
        if len(files) > cap:
            line += f" (+{len(files) - cap} more)"
        return line

    def basic_commit_details(self, commit: CommitRef) -> str:
        """Commit block of the basic tier"""
        limit = self.limits.basic.diff_limit
        details = f"Commit: {commit.message} (by {commit.author})"

        files = getattr(commit, "files_changed", None)
        if files:
            details += f"\nFiles changed: {self._files_line(files)}"

        additions = getattr(commit, "additions", None) or 0
        deletions = getattr(commit, "deletions", None) or 0
        if additions or deletions:
            details += f"\nChanges: +{additions} -{deletions}"

        diff = getattr(commit, "diff", None)
        if diff:
            details += f"\nDiff preview:\n{truncate(diff, limit)}"
        return details

    def _basic_prompt(
        self,
        commits: list[CommitRef],
        context: ProjectContext,
        previous_context: str | None,
    ) -> str:
        commit_details = "\n\n---\n\n".join(self.basic_commit_details(c) for c in commits)
        return BASIC_HUMAN.format(
            context_section=self._context_section(context, self.limits.basic.readme_limit),
            previous_context=_previous_context_block("Previous changelog entry", previous_context),
            commit_details=commit_details,
        )

    def diff_excerpt(self, diff: str) -> str:
        """Fenced diff excerpt of the enhanced tier"""
        limit = self.limits.enhanced.diff_limit
        excerpt = diff[:limit]
        if len(diff) > limit:
            excerpt += f"\n{TRUNCATION_MARKER}"
        return f"```diff\n{excerpt}\n```"

    def enhanced_commit_details(self, commit: CommitRef) -> str:
        """Commit block of the enhanced tier"""
        files = getattr(commit, "files_changed", None) or []
        additions = getattr(commit, "additions", None) or 0
        deletions = getattr(commit, "deletions", None) or 0

        lines = [
            f"### Commit: {commit.sha[:7]}",
            f"**Message:** {commit.message}",
            f"**Author:** {commit.author}",
            f"**Impact:** +{additions} -{deletions} lines",
        ]

        components = categorizer.categorize(files)
        if components:
            lines.append("")
            lines.append("**Components affected:**")
            lines.extend(f"- {label}" for label in components)

        diff = getattr(commit, "diff", None)
        if diff:
            lines.append("")
            lines.append("**Key changes:**")
            lines.append(self.diff_excerpt(diff))

        return "\n".join(lines)

    def _enhanced_prompt(
        self,
        commits: list[CommitRef],
        context: ProjectContext,
        previous_context: str | None,
    ) -> str:
        analysis = analyze_commits(commits)
        commit_details = "\n\n---\n\n".join(self.enhanced_commit_details(c) for c in commits)
        return ENHANCED_HUMAN.format(
            context_section=self._context_section(context, self.limits.enhanced.readme_limit),
            previous_context=_previous_context_block("Previous changelog", previous_context),
            total_commits=len(commits),
            authors=", ".join(analysis.authors),
            total_files=analysis.total_files,
            total_additions=analysis.total_additions,
            total_deletions=analysis.total_deletions,
            commit_details=commit_details,
        )
