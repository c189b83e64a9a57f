from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.core.exceptions import ConfigurationError
from app.infra.llm.base import BaseLLMClient


class VLLMClient(BaseLLMClient):
    """Client for an OpenAI-compatible vLLM endpoint"""

    def __init__(self):
        if not settings.vllm_api_url:
            raise ConfigurationError("VLLM_API_URL not configured")

    def get_chat_model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        """LangChain ChatOpenAI model pointed at the vLLM base URL"""
        return ChatOpenAI(
            model=settings.vllm_model,
            api_key=settings.vllm_api_key or "EMPTY",
            base_url=settings.vllm_api_url,
            timeout=settings.vllm_timeout,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def get_model_name(self) -> str:
        return settings.vllm_model
