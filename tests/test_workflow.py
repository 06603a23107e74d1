"""
End-to-end tests for the agent orchestration graph.

The reasoning engine is scripted; capability handlers record every call
so tests can assert which domain services ran and with which arguments.
"""
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage

from agent.capabilities import NO_EVENTS_MESSAGE, build_default_handlers, render_events, render_performance
from agent.dispatcher import CapabilityDispatcher, CapabilityHandler
from agent.exceptions import InvalidArgumentError, ServiceUnavailableError
from agent.reconciler import CLARIFICATION_MESSAGE, MismatchPolicy
from agent.registry import (
    DEFAULT_REGISTRY,
    PERFORMANCE_ANALYSIS,
    PERSONALIZED_ADVICE,
    UPCOMING_EVENTS,
)
from agent.state import ResponseStatus
from agent.workflow import AgentOrchestrator, route_after_intent, route_after_reconcile
from conftest import FakeEngine, tool_call
from tools import create_event, create_grade, create_student


MATH_ANALYSIS = {
    "overall_average": 62.5,
    "subject_averages": {"Math": 58.0},
    "weak_subjects": [{"subject": "Math", "average": 58.0, "details": [58.0]}],
    "weak_topics": [],
    "grade_count": 12,
}


class RecordingHandlers:
    """Capability handlers returning canned results and recording calls."""

    def __init__(self, performance=MATH_ANALYSIS, events=None, advice=None):
        self.calls = []
        self.results = {
            PERFORMANCE_ANALYSIS: performance,
            UPCOMING_EVENTS: events if events is not None else [],
            PERSONALIZED_ADVICE: advice or {"advice": "Practice fractions daily."},
        }

    def _execute(self, name):
        def execute(args):
            self.calls.append((name, dict(args)))
            result = self.results[name]
            if isinstance(result, Exception):
                raise result
            return result
        return execute

    def table(self):
        return {
            PERFORMANCE_ANALYSIS: CapabilityHandler(self._execute(PERFORMANCE_ANALYSIS), render_performance),
            UPCOMING_EVENTS: CapabilityHandler(self._execute(UPCOMING_EVENTS), render_events),
            PERSONALIZED_ADVICE: CapabilityHandler(self._execute(PERSONALIZED_ADVICE), lambda r: r["advice"]),
        }

    def names(self):
        return [name for name, _ in self.calls]


def build_orchestrator(engine, handlers, policy=MismatchPolicy.OVERRIDE):
    dispatcher = CapabilityDispatcher(DEFAULT_REGISTRY, handlers.table(), timeout_seconds=5)
    return AgentOrchestrator(engine, dispatcher=dispatcher, policy=policy, source_tag="Test Agent")


class TestRouting:
    """Tests for the conditional edges."""

    def test_route_after_intent(self):
        assert route_after_intent({"invocations": [object()]}) == "reconcile"
        assert route_after_intent({"invocations": []}) == "no_tool"

    def test_route_after_reconcile(self):
        assert route_after_reconcile({"clarification": object()}) == "clarify"
        assert route_after_reconcile({"clarification": None}) == "dispatch"


class TestScoping:
    """The caller's student id is the only one that reaches a domain service."""

    def test_engine_supplied_id_is_overridden(self):
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[
            tool_call(PERFORMANCE_ANALYSIS, {"student_id": "B"}),
        ]))
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers).run("How is student B doing?", "A")

        assert handlers.calls == [(PERFORMANCE_ANALYSIS, {"student_id": "A"})]
        assert response.status == ResponseStatus.ANSWERED
        assert response.policy_events == ()

    def test_report_policy_returns_policy_event(self):
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[
            tool_call(PERFORMANCE_ANALYSIS, {"student_id": "B"}),
        ]))
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers, MismatchPolicy.REPORT).run("How is B doing?", "A")

        assert handlers.calls[0][1]["student_id"] == "A"
        assert len(response.policy_events) == 1
        assert response.policy_events[0].kind == "subject_override"

    def test_missing_id_asks_for_clarification(self):
        """No domain call happens and the engine is not asked to synthesize."""
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[
            tool_call(UPCOMING_EVENTS, {}, "c1"),
            tool_call(PERSONALIZED_ADVICE, {}, "c2"),
        ]))
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers).run("Give me advice")

        assert response.text == CLARIFICATION_MESSAGE
        assert response.status == ResponseStatus.CLARIFICATION
        assert handlers.calls == []
        assert engine.complete_calls == []


class TestScenarios:
    """Whole-request behavior."""

    def test_math_question(self):
        engine = FakeEngine(
            intent=AIMessage(content="", tool_calls=[tool_call(PERFORMANCE_ANALYSIS)]),
            completion="Math is your weakest subject; let's work on it.",
        )
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers).run("How am I doing in math?", "S1")

        assert response.text == "Math is your weakest subject; let's work on it."
        assert response.source == "Test Agent"
        assert handlers.calls == [(PERFORMANCE_ANALYSIS, {"student_id": "S1"})]
        assert UPCOMING_EVENTS not in handlers.names()
        assert "Weak subjects: Math (average: 58.00)" in engine.complete_calls[0]

    def test_no_upcoming_events_still_answers(self):
        engine = FakeEngine(
            intent=AIMessage(content="", tool_calls=[tool_call(UPCOMING_EVENTS)]),
            completion="There are no olympiads scheduled right now.",
        )
        handlers = RecordingHandlers(events=[])

        response = build_orchestrator(engine, handlers).run("What olympiads are coming up?")

        assert response.text == "There are no olympiads scheduled right now."
        assert handlers.calls == [(UPCOMING_EVENTS, {})]
        assert NO_EVENTS_MESSAGE in engine.complete_calls[0]

    def test_failed_capability_degrades_answer(self):
        engine = FakeEngine(
            intent=AIMessage(content="", tool_calls=[tool_call(PERSONALIZED_ADVICE)]),
            completion="I could not load advice right now, please try again later.",
        )
        handlers = RecordingHandlers(advice=ConnectionError("advice service timed out"))

        response = build_orchestrator(engine, handlers).run("Give me advice", "S2")

        assert response.text
        assert f'Failed to retrieve data for "{PERSONALIZED_ADVICE}": advice service timed out' in engine.complete_calls[0]

    def test_batch_isolation(self):
        """One failing capability leaves the others intact."""
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[
            tool_call(PERFORMANCE_ANALYSIS, {}, "c1"),
            tool_call(UPCOMING_EVENTS, {}, "c2"),
        ]))
        handlers = RecordingHandlers(performance=RuntimeError("database unavailable"), events=[{
            "title": "City Math Olympiad",
            "type": "Olympiad",
            "event_date": "2030-03-01",
            "location": None,
            "invitation_link": None,
        }])

        build_orchestrator(engine, handlers).run("Grades and olympiads?", "S1")

        instruction = engine.complete_calls[0]
        assert "database unavailable" in instruction
        assert "**City Math Olympiad** (Olympiad) 2030-03-01 at location not specified" in instruction

    def test_unknown_capability_does_not_crash(self):
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[
            tool_call("drop_all_grades", {"student_id": "S1"}, "c1"),
            tool_call(UPCOMING_EVENTS, {}, "c2"),
        ]))
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers).run("Do something", "S1")

        assert response.status == ResponseStatus.ANSWERED
        assert handlers.names() == [UPCOMING_EVENTS]
        assert "Unknown capability: drop_all_grades" in engine.complete_calls[0]

    def test_free_text_returned_unchanged(self):
        engine = FakeEngine(intent=AIMessage(content="Hello! How can I help?"))
        handlers = RecordingHandlers()

        response = build_orchestrator(engine, handlers).run("Hi")

        assert response.text == "Hello! How can I help?"
        assert handlers.calls == []
        assert engine.complete_calls == []

    def test_empty_reply_completed_directly(self):
        engine = FakeEngine(intent=AIMessage(content=""), completion="Direct answer.")

        response = build_orchestrator(engine, RecordingHandlers()).run("Tell me a fact")

        assert response.text == "Direct answer."
        assert engine.complete_calls == ["Tell me a fact"]


class TestFailures:
    """Only invalid input and engine failures abort a request."""

    def test_blank_query_rejected(self):
        engine = FakeEngine()
        with pytest.raises(InvalidArgumentError):
            build_orchestrator(engine, RecordingHandlers()).run("   ")
        assert engine.intent_calls == []

    def test_intent_failure(self):
        engine = FakeEngine(intent=ServiceUnavailableError("engine down"))
        with pytest.raises(ServiceUnavailableError):
            build_orchestrator(engine, RecordingHandlers()).run("How am I doing?", "S1")

    def test_malformed_reply(self):
        engine = FakeEngine(intent=SimpleNamespace(
            content="",
            tool_calls=[{"name": PERFORMANCE_ANALYSIS, "args": "S1", "id": "c1"}],
            invalid_tool_calls=[],
        ))
        handlers = RecordingHandlers()

        with pytest.raises(ServiceUnavailableError):
            build_orchestrator(engine, handlers).run("How am I doing?", "S1")
        assert handlers.calls == []

    def test_synthesis_failure(self):
        engine = FakeEngine(
            intent=AIMessage(content="", tool_calls=[tool_call(PERFORMANCE_ANALYSIS)]),
            completion=ServiceUnavailableError("engine down"),
        )
        with pytest.raises(ServiceUnavailableError):
            build_orchestrator(engine, RecordingHandlers()).run("How am I doing?", "S1")


class TestDatabaseBackedHandlers:
    """The default handlers read real records."""

    def test_performance_from_database(self, db):
        student = create_student(db, "Test Student", "10A")
        create_grade(db, student["id"], "Math", "Fractions", 50, date(2024, 1, 10))
        create_grade(db, student["id"], "History", "Middle Ages", 95, date(2024, 1, 11))
        create_event(db, "Future Olympiad", date.today() + timedelta(days=10), "Olympiad")

        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[tool_call(PERFORMANCE_ANALYSIS)]))
        dispatcher = CapabilityDispatcher(DEFAULT_REGISTRY, build_default_handlers(engine))
        AgentOrchestrator(engine, dispatcher=dispatcher).run("How am I doing?", student["id"])

        instruction = engine.complete_calls[0]
        assert "Overall average: 72.50." in instruction
        assert "Weak subjects: Math (average: 50.00)." in instruction
        assert "Fractions in Math" in instruction
        assert "Future Olympiad" not in instruction

    def test_unknown_student_becomes_failed_outcome(self, db):
        engine = FakeEngine(intent=AIMessage(content="", tool_calls=[tool_call(PERFORMANCE_ANALYSIS)]))
        dispatcher = CapabilityDispatcher(DEFAULT_REGISTRY, build_default_handlers(engine))

        response = AgentOrchestrator(engine, dispatcher=dispatcher).run("How am I doing?", "missing")

        assert response.text == "Synthesized answer."
        assert "Student with id missing not found" in engine.complete_calls[0]
