"""Agent module for the AI Schoolmate backend."""
from .exceptions import (
    AgentError,
    InvalidArgumentError,
    ServiceUnavailableError,
    UnknownCapabilityError,
    RegistryMismatchError,
)
from .state import (
    AgentResponse,
    AgentState,
    ClarificationNeeded,
    InvocationOutcome,
    InvocationRequest,
    OrchestrationRequest,
    PolicyEvent,
    ResponseStatus,
)
from .registry import CapabilityDescriptor, CapabilityRegistry, ParameterSpec, DEFAULT_REGISTRY
from .engine import ReasoningEngine, get_engine
from .resolver import IntentResolver
from .reconciler import MismatchPolicy, reconcile, reconcile_batch
from .dispatcher import CapabilityDispatcher, CapabilityHandler
from .synthesizer import ResponseSynthesizer
from .workflow import AgentOrchestrator, create_agent_graph, get_orchestrator, run_agent_query

__all__ = [
    "AgentError",
    "InvalidArgumentError",
    "ServiceUnavailableError",
    "UnknownCapabilityError",
    "RegistryMismatchError",
    "AgentResponse",
    "AgentState",
    "ClarificationNeeded",
    "InvocationOutcome",
    "InvocationRequest",
    "OrchestrationRequest",
    "PolicyEvent",
    "ResponseStatus",
    "CapabilityDescriptor",
    "CapabilityRegistry",
    "ParameterSpec",
    "DEFAULT_REGISTRY",
    "ReasoningEngine",
    "get_engine",
    "IntentResolver",
    "MismatchPolicy",
    "reconcile",
    "reconcile_batch",
    "CapabilityDispatcher",
    "CapabilityHandler",
    "ResponseSynthesizer",
    "AgentOrchestrator",
    "create_agent_graph",
    "get_orchestrator",
    "run_agent_query",
]
