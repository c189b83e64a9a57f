from typing import Literal

from app.core.config import settings
from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.gemini_client import GeminiClient
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

logger = get_logger(__name__)

LLMProvider = Literal["openai", "vllm", "gemini"]


def create_llm_client(provider: LLMProvider | None = None) -> BaseLLMClient:
    """Build the completion client of the configured provider

    Raises:
        ConfigurationError: unknown provider or missing credentials
    """
    provider = provider or settings.llm_provider

    if provider == "openai":
        client: BaseLLMClient = OpenAIClient()
    elif provider == "vllm":
        client = VLLMClient()
    elif provider == "gemini":
        client = GeminiClient()
    else:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    logger.info("LLM client initialized provider=%s model=%s", provider, client.get_model_name())
    return client
