"""
LangGraph nodes for the AI Schoolmate agent workflow.
"""
import logging

from .dispatcher import CapabilityDispatcher
from .reconciler import MismatchPolicy, reconcile_batch
from .registry import CapabilityRegistry
from .resolver import IntentResolver
from .state import AgentState, ClarificationNeeded, FreeText, ResponseStatus
from .synthesizer import ResponseSynthesizer

logger = logging.getLogger(__name__)


class AgentNodes:
    """
    The orchestration steps, bound to their collaborators.

    Args:
        resolver: Intent resolver (first engine round trip)
        dispatcher: Capability dispatcher
        synthesizer: Response synthesizer (second engine round trip)
        registry: Capability catalog
        policy: Subject mismatch policy
    """

    def __init__(
        self,
        resolver: IntentResolver,
        dispatcher: CapabilityDispatcher,
        synthesizer: ResponseSynthesizer,
        registry: CapabilityRegistry,
        policy: MismatchPolicy = MismatchPolicy.OVERRIDE
    ):
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.synthesizer = synthesizer
        self.registry = registry
        self.policy = policy

    def resolve_intent(self, state: AgentState) -> AgentState:
        """
        Node 1: Ask the engine which capabilities apply.

        Sets either invocations or free_text.
        """
        result = self.resolver.resolve(state["query"], state.get("subject_id"))

        if isinstance(result, FreeText):
            state["invocations"] = []
            state["free_text"] = result.text
        else:
            state["invocations"] = list(result.invocations)
            state["free_text"] = None

        return state

    def reconcile_arguments(self, state: AgentState) -> AgentState:
        """
        Node 2: Enforce the caller's student scope on every invocation.
        NEVER trust an engine-supplied student id over the caller's.
        """
        result = reconcile_batch(
            state["invocations"],
            state.get("subject_id"),
            self.registry,
            self.policy,
        )

        if isinstance(result, ClarificationNeeded):
            state["clarification"] = result
            state["invocations"] = []
            return state

        state["invocations"], state["policy_events"] = result
        return state

    def dispatch_capabilities(self, state: AgentState) -> AgentState:
        """Node 3: Run the reconciled invocations."""
        state["outcomes"] = self.dispatcher.dispatch(state["invocations"])
        return state

    def synthesize_response(self, state: AgentState) -> AgentState:
        """Node 4: Turn outcomes into the final answer."""
        state["response"] = self.synthesizer.synthesize(state["query"], state["outcomes"])
        state["status"] = ResponseStatus.ANSWERED
        return state

    def no_tool_response(self, state: AgentState) -> AgentState:
        """
        Terminal: no capability applies.

        Returns the engine's own text, or a direct completion of the query
        when the engine gave none.
        """
        text = state.get("free_text")
        if not text:
            logger.info("No capability chosen and no text returned; completing query directly")
            text = self.resolver.engine.complete(state["query"])

        state["response"] = text
        state["status"] = ResponseStatus.ANSWERED
        return state

    def ask_clarification(self, state: AgentState) -> AgentState:
        """Terminal: ask the user for the missing student id."""
        state["response"] = state["clarification"].message
        state["status"] = ResponseStatus.CLARIFICATION
        return state
