"""
Exceptions raised by the agent orchestration core.

Only InvalidArgumentError and ServiceUnavailableError ever abort an
orchestration; capability failures are folded into the answer.
"""


class AgentError(Exception):
    """Base class for agent errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidArgumentError(AgentError):
    """Raised when the orchestration input is unusable (e.g. empty query)."""


class ServiceUnavailableError(AgentError):
    """Raised when the reasoning engine fails or replies in an unusable shape."""


class UnknownCapabilityError(AgentError):
    """Raised when a capability name is not in the registry."""

    def __init__(self, capability_name: str):
        self.capability_name = capability_name
        super().__init__(f"Unknown capability: {capability_name}")


class RegistryMismatchError(AgentError):
    """Raised at startup when dispatch handlers do not match the registry."""
