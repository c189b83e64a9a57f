from app.domain.changelog.prompts.changelog import (
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
from app.domain.changelog.prompts.summary import (
    PROJECT_SUMMARY_HUMAN,
    PROJECT_SUMMARY_SYSTEM,
)

__all__ = [
    "QUICK_SYSTEM",
    "QUICK_HUMAN",
    "QUICK_SECTIONS",
    "QUICK_BUG_FIX_SECTION",
    "BASIC_SYSTEM",
    "BASIC_HUMAN",
    "ENHANCED_SYSTEM",
    "ENHANCED_HUMAN",
    "CONTEXT_SECTION",
    "PROJECT_SUMMARY_SYSTEM",
    "PROJECT_SUMMARY_HUMAN",
]
