from abc import ABC, abstractmethod

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from app.core.exceptions import LLMError
from app.core.logging import get_logger
from app.infra.llm.tracing import build_run_config

logger = get_logger(__name__)


def _message_text(content: str | list) -> str:
    """Flatten LangChain message content into plain text"""
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class BaseLLMClient(ABC):
    """Completion client over a LangChain chat model

    Concrete clients validate their credentials in __init__, so a missing key
    fails before any network call.
    """

    @abstractmethod
    def get_chat_model(self, temperature: float, max_tokens: int) -> BaseChatModel:
        """Return a LangChain chat model with the given sampling settings"""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the model name in use"""
        pass

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        tags: list[str] | None = None,
        session_id: str | None = None,
    ) -> str:
        """Run one completion

        Returns:
            the response text, possibly empty

        Raises:
            LLMError: the completion call failed
        """
        model = self.get_chat_model(temperature, max_tokens)
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        config = build_run_config(tags or [], session_id)

        logger.debug(
            "completion request model=%s prompt_chars=%d max_tokens=%d",
            self.get_model_name(),
            len(user_prompt),
            max_tokens,
        )
        try:
            response = await model.ainvoke(messages, config=config)
        except Exception as e:
            logger.error(
                "completion failed model=%s error=%s", self.get_model_name(), type(e).__name__
            )
            raise LLMError(detail=f"{type(e).__name__}: {e}") from e

        text = _message_text(response.content).strip()
        logger.debug("completion done model=%s chars=%d", self.get_model_name(), len(text))
        return text
