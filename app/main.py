from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger, setup_logging
from app.domain.changelog.service import ChangelogService
from app.infra.github.client import GitHubClient
from app.infra.llm import create_llm_client
from app.infra.storage.base import BaseStorage
from app.infra.storage.memory import InMemoryStorage

setup_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def changelog_service(
    storage: BaseStorage | None = None,
) -> AsyncIterator[ChangelogService]:
    """Build a ChangelogService and release its clients on exit

    Raises:
        ConfigurationError: production settings are incomplete, or the LLM
            provider is unknown or missing credentials
    """
    if settings.is_production:
        errors = settings.validate_for_production()
        if errors:
            raise ConfigurationError(f"Missing production settings: {', '.join(errors)}")

    llm = create_llm_client()
    github = GitHubClient()
    service = ChangelogService(storage or InMemoryStorage(), github, llm)
    logger.info("changelog service started environment=%s", settings.environment)

    try:
        yield service
    finally:
        await github.aclose()
        logger.info("changelog service stopped")
