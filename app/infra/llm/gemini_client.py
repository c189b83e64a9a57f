from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from app.core.config import settings
from app.core.exceptions import ConfigurationError
from app.infra.llm.base import BaseLLMClient


class GeminiClient(BaseLLMClient):
    """Gemini client"""

    def __init__(self):
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")

    def get_chat_model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        """LangChain ChatGoogleGenerativeAI model"""
        return ChatGoogleGenerativeAI(
            model=settings.gemini_model,
            google_api_key=settings.gemini_api_key,
            timeout=settings.gemini_timeout,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

    def get_model_name(self) -> str:
        return settings.gemini_model
