"""
Tests for the capability dispatcher.
"""
import threading

import pytest

from agent.dispatcher import CapabilityDispatcher, CapabilityHandler
from agent.exceptions import RegistryMismatchError
from agent.registry import CapabilityDescriptor, CapabilityRegistry, ParameterSpec
from agent.state import InvocationRequest


REGISTRY = CapabilityRegistry([
    CapabilityDescriptor(
        name="echo",
        description="Echo the student id",
        parameters={"student_id": ParameterSpec("string", "Student id", required=True)},
        subject_parameter="student_id",
    ),
    CapabilityDescriptor(name="boom", description="Always fails"),
    CapabilityDescriptor(name="slow", description="Never finishes in time"),
])


def _raise(args):
    raise RuntimeError("database unavailable")


@pytest.fixture
def release():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def dispatcher(release):
    handlers = {
        "echo": CapabilityHandler(execute=lambda args: args["student_id"], render=lambda r: f"echo {r}"),
        "boom": CapabilityHandler(execute=_raise, render=str),
        "slow": CapabilityHandler(execute=lambda args: release.wait(5), render=str),
    }
    return CapabilityDispatcher(REGISTRY, handlers, timeout_seconds=0.2)


class TestDispatcherConstruction:
    """The dispatch table must match the registry."""

    def test_missing_handler_rejected(self):
        with pytest.raises(RegistryMismatchError):
            CapabilityDispatcher(REGISTRY, {"echo": CapabilityHandler(execute=dict, render=str)})

    def test_unregistered_handler_rejected(self):
        registry = CapabilityRegistry([CapabilityDescriptor(name="a", description="A")])
        handlers = {
            "a": CapabilityHandler(execute=dict, render=str),
            "b": CapabilityHandler(execute=dict, render=str),
        }
        with pytest.raises(RegistryMismatchError):
            CapabilityDispatcher(registry, handlers)


class TestDispatch:
    """Tests for batch execution."""

    def test_success(self, dispatcher):
        outcomes = dispatcher.dispatch([InvocationRequest("echo", {"student_id": "A"})])

        assert len(outcomes) == 1
        assert outcomes[0].succeeded
        assert outcomes[0].result_summary == "echo A"

    def test_failure_is_isolated(self, dispatcher):
        """One failing capability does not affect the others."""
        outcomes = dispatcher.dispatch([
            InvocationRequest("boom"),
            InvocationRequest("echo", {"student_id": "A"}),
        ])

        assert not outcomes[0].succeeded
        assert outcomes[0].error_message == "database unavailable"
        assert outcomes[0].render() == 'Failed to retrieve data for "boom": database unavailable'
        assert outcomes[1].succeeded

    def test_unknown_capability_rejected_without_running(self, dispatcher):
        outcomes = dispatcher.dispatch([
            InvocationRequest("drop_tables"),
            InvocationRequest("echo", {"student_id": "A"}),
        ])

        assert outcomes[0].capability_name == "drop_tables"
        assert outcomes[0].error_message == "Unknown capability: drop_tables"
        assert outcomes[1].result_summary == "echo A"

    def test_missing_required_argument(self, dispatcher):
        outcomes = dispatcher.dispatch([InvocationRequest("echo")])

        assert not outcomes[0].succeeded
        assert "student_id" in outcomes[0].error_message

    def test_timeout_becomes_failure(self, dispatcher):
        outcomes = dispatcher.dispatch([
            InvocationRequest("slow"),
            InvocationRequest("echo", {"student_id": "A"}),
        ])

        assert not outcomes[0].succeeded
        assert outcomes[0].error_message.startswith("Timed out")
        assert outcomes[1].succeeded

    def test_outcomes_keep_input_order(self, dispatcher):
        names = ["echo", "boom", "echo"]
        outcomes = dispatcher.dispatch([InvocationRequest(n, {"student_id": "A"}) for n in names])

        assert [o.capability_name for o in outcomes] == names

    def test_empty_batch(self, dispatcher):
        assert dispatcher.dispatch([]) == []
