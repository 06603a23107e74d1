"""
LangGraph workflow for the AI Schoolmate agent.
"""
import logging
from typing import Optional

from langgraph.graph import StateGraph, END

from config import settings
from .capabilities import build_default_handlers
from .dispatcher import CapabilityDispatcher
from .engine import ReasoningEngine, get_engine
from .exceptions import InvalidArgumentError
from .nodes import AgentNodes
from .reconciler import MismatchPolicy
from .registry import CapabilityRegistry, DEFAULT_REGISTRY
from .resolver import IntentResolver
from .state import AgentResponse, AgentState, OrchestrationRequest, ResponseStatus
from .synthesizer import ResponseSynthesizer

logger = logging.getLogger(__name__)


def route_after_intent(state: AgentState) -> str:
    """
    Routes to:
    - "reconcile" if the engine requested invocations
    - "no_tool" otherwise
    """
    if state.get("invocations"):
        return "reconcile"
    return "no_tool"


def route_after_reconcile(state: AgentState) -> str:
    """
    Routes to:
    - "clarify" if a required student id is missing
    - "dispatch" otherwise
    """
    if state.get("clarification"):
        return "clarify"
    return "dispatch"


def create_agent_graph(nodes: AgentNodes) -> StateGraph:
    """
    Create the LangGraph workflow for the agent.

    Workflow:
    1. resolve_intent - Ask the engine which capabilities apply
    2. route - No capability: answer directly
    3. reconcile_arguments - Enforce the caller's student scope
    4. route - Missing student id: ask for it
    5. dispatch_capabilities - Run the invocations
    6. synthesize_response - Turn outcomes into prose

    Returns:
        Uncompiled StateGraph
    """
    workflow = StateGraph(AgentState)

    # Add nodes
    workflow.add_node("resolve_intent", nodes.resolve_intent)
    workflow.add_node("reconcile_arguments", nodes.reconcile_arguments)
    workflow.add_node("dispatch_capabilities", nodes.dispatch_capabilities)
    workflow.add_node("synthesize_response", nodes.synthesize_response)
    workflow.add_node("no_tool_response", nodes.no_tool_response)
    workflow.add_node("ask_clarification", nodes.ask_clarification)

    # Define edges
    workflow.set_entry_point("resolve_intent")

    workflow.add_conditional_edges(
        "resolve_intent",
        route_after_intent,
        {
            "reconcile": "reconcile_arguments",
            "no_tool": "no_tool_response",
        }
    )

    workflow.add_conditional_edges(
        "reconcile_arguments",
        route_after_reconcile,
        {
            "clarify": "ask_clarification",
            "dispatch": "dispatch_capabilities",
        }
    )

    workflow.add_edge("dispatch_capabilities", "synthesize_response")
    workflow.add_edge("synthesize_response", END)
    workflow.add_edge("no_tool_response", END)
    workflow.add_edge("ask_clarification", END)

    return workflow


class AgentOrchestrator:
    """
    Wires the collaborators together and runs the compiled graph.

    Args:
        engine: Reasoning engine
        registry: Capability catalog
        dispatcher: Capability dispatcher (defaults to the database-backed handlers)
        policy: Subject mismatch policy (defaults to settings)
        source_tag: Literal tag identifying agent answers (defaults to settings)
    """

    def __init__(
        self,
        engine: ReasoningEngine,
        registry: CapabilityRegistry = DEFAULT_REGISTRY,
        dispatcher: Optional[CapabilityDispatcher] = None,
        policy: Optional[MismatchPolicy] = None,
        source_tag: Optional[str] = None
    ):
        if dispatcher is None:
            dispatcher = CapabilityDispatcher(
                registry,
                build_default_handlers(engine),
                timeout_seconds=settings.tool_timeout_seconds,
                max_workers=settings.tool_max_workers,
            )

        self.registry = registry
        self.source_tag = source_tag or settings.agent_source_tag
        self.nodes = AgentNodes(
            resolver=IntentResolver(engine, registry),
            dispatcher=dispatcher,
            synthesizer=ResponseSynthesizer(engine),
            registry=registry,
            policy=MismatchPolicy(policy or settings.subject_mismatch_policy),
        )
        self.graph = create_agent_graph(self.nodes).compile()

    def run(self, query: str, subject_id: Optional[str] = None) -> AgentResponse:
        """
        Answer a natural-language query, optionally scoped to a student.

        Raises:
            InvalidArgumentError: If the query is empty
            ServiceUnavailableError: If the reasoning engine fails
        """
        if not query or not query.strip():
            raise InvalidArgumentError("Query is required for the AI agent.")

        request = OrchestrationRequest(
            query=query.strip(),
            subject_id=subject_id.strip() if subject_id and subject_id.strip() else None,
        )
        initial_state: AgentState = {
            "query": request.query,
            "subject_id": request.subject_id,
            "invocations": [],
            "policy_events": [],
            "outcomes": [],
        }

        final_state = self.graph.invoke(initial_state)

        return AgentResponse(
            text=final_state.get("response", ""),
            source=self.source_tag,
            status=final_state.get("status", ResponseStatus.ANSWERED),
            policy_events=tuple(final_state.get("policy_events") or ()),
        )


# Create the orchestrator once
_orchestrator = None


def get_orchestrator() -> AgentOrchestrator:
    """Get or create the default orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AgentOrchestrator(get_engine())
    return _orchestrator


def run_agent_query(query: str, subject_id: Optional[str] = None) -> AgentResponse:
    """
    Run the agent on a user query.

    Args:
        query: The user's natural-language request
        subject_id: Student the request is scoped to, if any

    Returns:
        AgentResponse with the answer text and source tag
    """
    if not query or not query.strip():
        raise InvalidArgumentError("Query is required for the AI agent.")
    return get_orchestrator().run(query, subject_id)
