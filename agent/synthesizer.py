"""
Response synthesizer: turns invocation outcomes into the final answer.
"""
import logging
from typing import Sequence

from .engine import ReasoningEngine
from .state import InvocationOutcome

logger = logging.getLogger(__name__)


SYNTHESIS_PROMPT = """The user asked: "{query}". I ran the following operations and got these results:
{results}

Please synthesize these results into one coherent, friendly and helpful answer for a student.
If a weak subject or topic was reported, suggest concrete next steps. If there are olympiads or events, describe them briefly.
If some data could not be retrieved, say so plainly and answer with what is available."""


def build_synthesis_instruction(query: str, outcomes: Sequence[InvocationOutcome]) -> str:
    results = "\n\n".join(outcome.render() for outcome in outcomes)
    return SYNTHESIS_PROMPT.format(query=query, results=results)


class ResponseSynthesizer:
    """Single round trip to the engine; no fallback text on failure."""

    def __init__(self, engine: ReasoningEngine):
        self.engine = engine

    def synthesize(self, query: str, outcomes: Sequence[InvocationOutcome]) -> str:
        """
        Produce the final answer text.

        Raises:
            ServiceUnavailableError: If the engine fails
        """
        failed = sum(1 for o in outcomes if not o.succeeded)
        if failed:
            logger.info("Synthesizing with %d of %d capability failure(s)", failed, len(outcomes))
        return self.engine.complete(build_synthesis_instruction(query, outcomes))
