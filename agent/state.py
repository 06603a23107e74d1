"""
Agent state and value types for the AI Schoolmate orchestration graph.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypedDict, Union


class ResponseStatus(str, Enum):
    """How an orchestration ended."""
    ANSWERED = "answered"
    CLARIFICATION = "clarification"


@dataclass(frozen=True)
class OrchestrationRequest:
    """One incoming user request."""
    query: str
    subject_id: Optional[str] = None


@dataclass(frozen=True)
class InvocationRequest:
    """A capability call requested by the reasoning engine."""
    capability_name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "arguments", MappingProxyType(dict(self.arguments)))

    def with_argument(self, name: str, value: Any) -> "InvocationRequest":
        """Copy of this request with one argument set."""
        arguments = dict(self.arguments)
        arguments[name] = value
        return InvocationRequest(self.capability_name, arguments, self.call_id)


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of running one invocation; exactly one of summary/error is set."""
    capability_name: str
    succeeded: bool
    result_summary: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def success(cls, capability_name: str, summary: str) -> "InvocationOutcome":
        return cls(capability_name, True, result_summary=summary)

    @classmethod
    def failure(cls, capability_name: str, error: str) -> "InvocationOutcome":
        return cls(capability_name, False, error_message=error)

    def render(self) -> str:
        """Text block handed to the synthesizer."""
        if self.succeeded:
            return self.result_summary
        return f'Failed to retrieve data for "{self.capability_name}": {self.error_message}'


@dataclass(frozen=True)
class ClarificationNeeded:
    """Reconciliation could not proceed without more input from the user."""
    capability_name: str
    message: str


@dataclass(frozen=True)
class PolicyEvent:
    """A reconciliation decision worth recording (e.g. an overridden subject id)."""
    capability_name: str
    kind: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return {"capability": self.capability_name, "kind": self.kind, "detail": self.detail}


@dataclass(frozen=True)
class AgentResponse:
    """Terminal artifact returned to the caller."""
    text: str
    source: str
    status: ResponseStatus = ResponseStatus.ANSWERED
    policy_events: Tuple[PolicyEvent, ...] = ()


# Typed readings of the engine's intent reply

@dataclass(frozen=True)
class StructuredInvocations:
    invocations: Tuple[InvocationRequest, ...]


@dataclass(frozen=True)
class FreeText:
    text: str


@dataclass(frozen=True)
class Malformed:
    reason: str


IntentResult = Union[StructuredInvocations, FreeText, Malformed]


class AgentState(TypedDict, total=False):
    """
    State carried through the orchestration graph.

    Attributes:
        query: The user's natural-language request
        subject_id: Trusted student id supplied by the caller
        invocations: Invocation requests (engine-proposed, then reconciled)
        free_text: Engine text when no capability was chosen
        clarification: Set when reconciliation needs more input
        policy_events: Reconciliation decisions to surface
        outcomes: One outcome per dispatched invocation
        response: Final answer text
        status: How the orchestration ended
    """
    # Input
    query: str
    subject_id: Optional[str]

    # Intent
    invocations: List[InvocationRequest]
    free_text: Optional[str]

    # Reconciliation
    clarification: Optional[ClarificationNeeded]
    policy_events: List[PolicyEvent]

    # Execution
    outcomes: List[InvocationOutcome]

    # Response
    response: str
    status: ResponseStatus
