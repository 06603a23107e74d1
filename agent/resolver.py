"""
Intent resolver for the AI Schoolmate agent.
Asks the reasoning engine which capabilities, if any, answer a query.
"""
import logging
from typing import Optional, Union

from langchain_core.messages import AIMessage

from .engine import ReasoningEngine
from .exceptions import ServiceUnavailableError
from .registry import CapabilityRegistry
from .state import (
    FreeText,
    IntentResult,
    InvocationRequest,
    Malformed,
    StructuredInvocations,
)

logger = logging.getLogger(__name__)


INTENT_PROMPT = """The user asked: "{query}".
{subject_line}
Based on this, decide which tool(s) to use and with which arguments. You may call several tools at once.
If answering requires information about a specific student, make sure 'student_id' is passed.
If no tool fits, give a general answer as plain text.

Available tools:
{catalog}"""


def build_intent_instruction(query: str, subject_id: Optional[str], registry: CapabilityRegistry) -> str:
    """Single instruction carrying the query, the subject id and the catalog."""
    subject_line = f"Student ID: {subject_id}." if subject_id else "No student ID was provided."
    return INTENT_PROMPT.format(
        query=query,
        subject_line=subject_line,
        catalog=registry.describe(),
    )


def parse_engine_reply(message: AIMessage) -> IntentResult:
    """
    Classify the engine's reply.

    Returns:
        StructuredInvocations when tool calls are present and well formed,
        FreeText when the reply is plain text, Malformed otherwise
    """
    invalid = getattr(message, "invalid_tool_calls", None) or []
    if invalid:
        names = ", ".join(str(call.get("name")) for call in invalid)
        return Malformed(f"Unparseable tool call arguments for: {names}")

    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        invocations = []
        for call in tool_calls:
            name = call.get("name")
            args = call.get("args")
            if not name:
                return Malformed("Tool call without a name")
            if args is None:
                args = {}
            if not isinstance(args, dict):
                return Malformed(f"Arguments for '{name}' are not an object")
            invocations.append(InvocationRequest(name, args, call.get("id")))
        return StructuredInvocations(tuple(invocations))

    content = message.content
    if not isinstance(content, str):
        return Malformed("Reply content is not text")
    # Returned verbatim; whitespace-only text counts as no answer
    return FreeText(content if content.strip() else "")


class IntentResolver:
    """
    Resolves a query into invocation requests or a free-text answer.

    Args:
        engine: Reasoning engine to consult
        registry: Capability catalog offered to the engine
    """

    def __init__(self, engine: ReasoningEngine, registry: CapabilityRegistry):
        self.engine = engine
        self.registry = registry

    def resolve(
        self,
        query: str,
        subject_id: Optional[str] = None
    ) -> Union[StructuredInvocations, FreeText]:
        """
        One round trip to the engine.

        Raises:
            ServiceUnavailableError: If the engine fails or its reply is malformed
        """
        instruction = build_intent_instruction(query, subject_id, self.registry)
        message = self.engine.request_invocations(instruction, self.registry.to_tool_schemas())
        result = parse_engine_reply(message)

        if isinstance(result, Malformed):
            logger.error("Malformed intent reply: %s", result.reason)
            raise ServiceUnavailableError(f"Malformed reply from AI: {result.reason}")

        if isinstance(result, StructuredInvocations):
            logger.info(
                "Engine requested %d invocation(s): %s",
                len(result.invocations),
                ", ".join(i.capability_name for i in result.invocations),
            )
        return result
