from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.core.exceptions import ConfigurationError
from app.infra.llm.base import BaseLLMClient


class OpenAIClient(BaseLLMClient):
    """OpenAI API client"""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._model_name = model or settings.openai_model
        if not self._api_key:
            raise ConfigurationError("OpenAI API key not configured")

    def get_chat_model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        """LangChain ChatOpenAI model"""
        return ChatOpenAI(
            model=self._model_name,
            api_key=self._api_key,
            timeout=settings.openai_timeout,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def get_model_name(self) -> str:
        return self._model_name
