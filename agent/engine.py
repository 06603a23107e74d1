"""
Reasoning engine adapter.

Wraps the OpenAI chat models behind the three calls the backend makes:
tool selection, free-form completion and advice drafting. Every call is
stateless and carries its whole context. Timeouts and bounded retries
are delegated to the OpenAI client; a retry resends the identical request.
"""
import logging
from typing import Any, Dict, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage
from langchain_openai import ChatOpenAI

from config import settings
from .exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


class ReasoningEngine:
    """
    Stateless gateway to the reasoning engine.

    Args:
        tool_llm: Chat model used for tool selection
        chat_llm: Chat model used for completions and synthesis
        advice_llm: Chat model used for personalized advice (defaults to chat_llm)
    """

    def __init__(
        self,
        tool_llm: BaseChatModel,
        chat_llm: BaseChatModel,
        advice_llm: Optional[BaseChatModel] = None
    ):
        self.tool_llm = tool_llm
        self.chat_llm = chat_llm
        self.advice_llm = advice_llm or chat_llm

    @classmethod
    def from_settings(cls) -> "ReasoningEngine":
        """Build the engine from application settings."""
        if not settings.openai_api_key:
            raise ServiceUnavailableError("OpenAI service is not configured correctly.")

        common = {
            "api_key": settings.openai_api_key,
            "timeout": settings.llm_timeout_seconds,
            "max_retries": settings.llm_max_retries,
        }
        return cls(
            tool_llm=ChatOpenAI(model=settings.openai_tool_model, temperature=0, **common),
            chat_llm=ChatOpenAI(
                model=settings.openai_model,
                temperature=settings.synthesis_temperature,
                max_tokens=settings.synthesis_max_tokens,
                **common,
            ),
            advice_llm=ChatOpenAI(model=settings.openai_advice_model, temperature=0.7, **common),
        )

    def request_invocations(self, instruction: str, tools: List[Dict[str, Any]]) -> AIMessage:
        """
        Ask the engine which tools (if any) to call.

        Returns:
            The raw AI message, which may carry tool calls or plain text

        Raises:
            ServiceUnavailableError: If the engine call fails
        """
        try:
            runnable = self.tool_llm.bind_tools(tools, tool_choice="auto")
            return runnable.invoke([HumanMessage(content=instruction)])
        except Exception as e:
            logger.error("Tool-selection call failed: %s", e)
            raise ServiceUnavailableError(f"Failed to process AI tool call: {e}") from e

    def complete(self, instruction: str) -> str:
        """
        Free-form completion.

        Raises:
            ServiceUnavailableError: If the call fails or returns no text
        """
        return self._text_call(self.chat_llm, instruction, "completion")

    def advise(self, instruction: str) -> str:
        """Completion on the advice model; same failure contract as complete()."""
        return self._text_call(self.advice_llm, instruction, "advice")

    def _text_call(self, llm: BaseChatModel, instruction: str, purpose: str) -> str:
        try:
            message = llm.invoke([HumanMessage(content=instruction)])
        except Exception as e:
            logger.error("%s call failed: %s", purpose.capitalize(), e)
            raise ServiceUnavailableError(f"Failed to get response from AI: {e}") from e

        content = message.content
        if not isinstance(content, str) or not content.strip():
            raise ServiceUnavailableError(f"AI returned an empty {purpose}")
        return content


_engine_instance = None


def get_engine() -> ReasoningEngine:
    """Get or create the engine instance."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = ReasoningEngine.from_settings()
    return _engine_instance
