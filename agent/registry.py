"""
Capability registry: the static catalog of tools the reasoning engine
may ask the agent to run.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ParameterSpec:
    """One argument accepted by a capability."""
    type: str
    description: str
    required: bool = False

    def to_schema(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description}


@dataclass(frozen=True)
class CapabilityDescriptor:
    """
    Describes one invocable capability.

    Attributes:
        name: Unique capability name, as the engine will call it
        description: Purpose, written for the engine
        parameters: Ordered, read-only mapping of parameter name to spec
        subject_parameter: Name of the parameter carrying the student id, if any
    """
    name: str
    description: str
    parameters: Mapping[str, ParameterSpec] = field(default_factory=dict)
    subject_parameter: Optional[str] = None

    def __post_init__(self):
        # Read-only after construction
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        if self.subject_parameter and self.subject_parameter not in self.parameters:
            raise ValueError(
                f"Capability '{self.name}' names subject parameter "
                f"'{self.subject_parameter}' that it does not declare"
            )

    @property
    def requires_subject(self) -> bool:
        """Whether the capability cannot run without a subject identifier."""
        if not self.subject_parameter:
            return False
        return self.parameters[self.subject_parameter].required

    @property
    def required_parameters(self) -> List[str]:
        return [name for name, spec in self.parameters.items() if spec.required]

    def to_tool_schema(self) -> Dict[str, Any]:
        """Render as an OpenAI function-tool definition."""
        parameters: Dict[str, Any] = {
            "type": "object",
            "properties": {name: spec.to_schema() for name, spec in self.parameters.items()},
        }
        if self.required_parameters:
            parameters["required"] = self.required_parameters
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class CapabilityRegistry:
    """Ordered, immutable collection of capability descriptors."""

    def __init__(self, descriptors: Sequence[CapabilityDescriptor]):
        self._descriptors: Tuple[CapabilityDescriptor, ...] = tuple(descriptors)
        self._by_name = {}
        for descriptor in self._descriptors:
            if descriptor.name in self._by_name:
                raise ValueError(f"Duplicate capability name: {descriptor.name}")
            self._by_name[descriptor.name] = descriptor

    def __iter__(self) -> Iterator[CapabilityDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self._descriptors)

    def get(self, name: str) -> Optional[CapabilityDescriptor]:
        return self._by_name.get(name)

    def to_tool_schemas(self) -> List[Dict[str, Any]]:
        """All descriptors as OpenAI tool definitions, in registry order."""
        return [d.to_tool_schema() for d in self._descriptors]

    def describe(self) -> str:
        """Short plain-text catalog, one line per capability."""
        return "\n".join(f"- {d.name}: {d.description}" for d in self._descriptors)


PERFORMANCE_ANALYSIS = "get_student_performance_analysis"
UPCOMING_EVENTS = "get_upcoming_events"
PERSONALIZED_ADVICE = "get_personalized_advice"

STUDENT_ID_PARAM = "student_id"


DEFAULT_REGISTRY = CapabilityRegistry([
    CapabilityDescriptor(
        name=PERFORMANCE_ANALYSIS,
        description=(
            "Gets grades and performance analytics for a specific student. Use for questions "
            "about scores, progress, weak and strong subjects or topics."
        ),
        parameters={
            STUDENT_ID_PARAM: ParameterSpec("string", "UUID of the student.", required=True),
        },
        subject_parameter=STUDENT_ID_PARAM,
    ),
    CapabilityDescriptor(
        name=UPCOMING_EVENTS,
        description=(
            "Lists upcoming school events or olympiads. Use for questions about upcoming "
            "events, competitions and olympiads."
        ),
        parameters={
            "type": ParameterSpec(
                "string",
                "Event type (for example 'Olympiad', 'Competition', 'School Event'). Optional.",
            ),
        },
    ),
    CapabilityDescriptor(
        name=PERSONALIZED_ADVICE,
        description=(
            "Generates personalized advice for improving a specific student's results. Use when "
            "the user asks for study tips, help with weak topics or improving grades."
        ),
        parameters={
            STUDENT_ID_PARAM: ParameterSpec("string", "UUID of the student.", required=True),
        },
        subject_parameter=STUDENT_ID_PARAM,
    ),
])
