from datetime import datetime

from app.core.exceptions import ContextStateError
from app.domain.changelog.schemas import ContextStatus, ProjectContext, utcnow

SECONDS_PER_DAY = 60 * 60 * 24

ALLOWED_TRANSITIONS: dict[ContextStatus, frozenset[ContextStatus]] = {
    ContextStatus.PENDING: frozenset({ContextStatus.INDEXING}),
    ContextStatus.READY: frozenset({ContextStatus.INDEXING}),
    ContextStatus.FAILED: frozenset({ContextStatus.INDEXING}),
    ContextStatus.INDEXING: frozenset({ContextStatus.READY, ContextStatus.FAILED}),
}


def context_age_days(context: ProjectContext, now: datetime | None = None) -> float:
    """Fractional age of a context in days"""
    now = now or utcnow()
    return (now - context.updated_at).total_seconds() / SECONDS_PER_DAY


def needs_refresh(
    context: ProjectContext | None,
    max_age_days: float,
    now: datetime | None = None,
) -> bool:
    """Whether cached repository context must be refetched before use

    True when the context is absent, older than max_age_days, or carries
    neither a summary nor a README regardless of its age.
    """
    if context is None:
        return True
    if not context.summary and not context.readme:
        return True
    return context_age_days(context, now) > max_age_days


def can_start_refresh(context: ProjectContext | None, explicit: bool = False) -> bool:
    """Whether a refresh may move the context to indexing

    A failed context is terminal for automatic refreshes and only an explicit
    regenerate restarts it. An indexing context is never restarted.
    """
    if context is None:
        return True
    if context.status == ContextStatus.INDEXING:
        return False
    if context.status == ContextStatus.FAILED:
        return explicit
    return True


def transition(current: ContextStatus | None, target: ContextStatus) -> ContextStatus:
    """Validate a status change

    Raises:
        ContextStateError: the change is not allowed
    """
    current = current or ContextStatus.PENDING
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ContextStateError(detail=f"{current.value} -> {target.value}")
    return target


def is_usable(context: ProjectContext | None) -> bool:
    """Whether a context holds anything worth putting into a prompt"""
    return context is not None and context.has_content
