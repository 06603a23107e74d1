"""
Tests for student-scope reconciliation.

Verifies that an engine-supplied student id can never widen a request
beyond the caller's student.
"""
from agent.reconciler import (
    CLARIFICATION_MESSAGE,
    MismatchPolicy,
    ScopeAction,
    reconcile,
    reconcile_batch,
)
from agent.registry import (
    DEFAULT_REGISTRY,
    PERFORMANCE_ANALYSIS,
    PERSONALIZED_ADVICE,
    UPCOMING_EVENTS,
)
from agent.state import ClarificationNeeded, InvocationRequest


def invocation(name, **arguments):
    return InvocationRequest(name, arguments)


class TestReconcile:
    """Tests for single-invocation rules."""

    def test_mismatched_id_is_overridden(self):
        """The caller's id replaces a different engine-supplied id."""
        result = reconcile(invocation(PERFORMANCE_ANALYSIS, student_id="B"), "A", DEFAULT_REGISTRY)

        assert result.action == ScopeAction.OVERRIDDEN
        assert result.invocation.arguments["student_id"] == "A"
        assert result.event.capability_name == PERFORMANCE_ANALYSIS
        assert result.event.kind == "subject_override"

    def test_missing_id_is_inserted(self):
        result = reconcile(invocation(PERSONALIZED_ADVICE), "A", DEFAULT_REGISTRY)

        assert result.action == ScopeAction.INSERTED
        assert result.invocation.arguments["student_id"] == "A"
        assert result.event is None

    def test_missing_everywhere_needs_clarification(self):
        result = reconcile(invocation(PERFORMANCE_ANALYSIS), None, DEFAULT_REGISTRY)

        assert isinstance(result, ClarificationNeeded)
        assert result.message == CLARIFICATION_MESSAGE

    def test_blank_ids_count_as_missing(self):
        result = reconcile(invocation(PERFORMANCE_ANALYSIS, student_id="  "), "", DEFAULT_REGISTRY)
        assert isinstance(result, ClarificationNeeded)

    def test_matching_id_passes(self):
        result = reconcile(invocation(PERFORMANCE_ANALYSIS, student_id="A"), "A", DEFAULT_REGISTRY)

        assert result.action == ScopeAction.PASSED
        assert result.event is None

    def test_engine_id_without_caller_id_passes(self):
        """Unscoped requests may name a student explicitly."""
        result = reconcile(invocation(PERFORMANCE_ANALYSIS, student_id="B"), None, DEFAULT_REGISTRY)

        assert result.action == ScopeAction.PASSED
        assert result.invocation.arguments["student_id"] == "B"

    def test_capability_without_subject_untouched(self):
        original = invocation(UPCOMING_EVENTS, type="olympiad")
        result = reconcile(original, "A", DEFAULT_REGISTRY)

        assert result.action == ScopeAction.PASSED
        assert result.invocation is original

    def test_stray_id_on_capability_without_subject_is_overridden(self):
        """An engine-supplied student id is never passed through, even where unused."""
        result = reconcile(invocation(UPCOMING_EVENTS, student_id="B", type="Olympiad"), "A", DEFAULT_REGISTRY)

        assert result.action == ScopeAction.OVERRIDDEN
        assert result.invocation.arguments["student_id"] == "A"
        assert result.invocation.arguments["type"] == "Olympiad"
        assert result.event.capability_name == UPCOMING_EVENTS

    def test_stray_id_without_caller_id_passes(self):
        result = reconcile(invocation(UPCOMING_EVENTS, student_id="B"), None, DEFAULT_REGISTRY)
        assert result.action == ScopeAction.PASSED

    def test_unknown_capability_untouched(self):
        original = invocation("delete_everything", student_id="B")
        result = reconcile(original, "A", DEFAULT_REGISTRY)

        assert result.invocation is original

    def test_original_invocation_not_mutated(self):
        original = invocation(PERFORMANCE_ANALYSIS, student_id="B")
        reconcile(original, "A", DEFAULT_REGISTRY)

        assert original.arguments["student_id"] == "B"


class TestReconcileBatch:
    """Tests for batch reconciliation."""

    def test_every_invocation_scoped(self):
        batch = [
            invocation(PERFORMANCE_ANALYSIS, student_id="B"),
            invocation(UPCOMING_EVENTS),
            invocation(PERSONALIZED_ADVICE),
        ]

        reconciled, events = reconcile_batch(batch, "A", DEFAULT_REGISTRY)

        assert [i.capability_name for i in reconciled] == [
            PERFORMANCE_ANALYSIS, UPCOMING_EVENTS, PERSONALIZED_ADVICE,
        ]
        assert reconciled[0].arguments["student_id"] == "A"
        assert "student_id" not in reconciled[1].arguments
        assert reconciled[2].arguments["student_id"] == "A"

    def test_override_policy_keeps_events_internal(self):
        _, events = reconcile_batch(
            [invocation(PERFORMANCE_ANALYSIS, student_id="B")], "A", DEFAULT_REGISTRY, MismatchPolicy.OVERRIDE
        )
        assert events == []

    def test_report_policy_surfaces_events(self):
        _, events = reconcile_batch(
            [invocation(PERFORMANCE_ANALYSIS, student_id="B")], "A", DEFAULT_REGISTRY, MismatchPolicy.REPORT
        )
        assert len(events) == 1
        assert events[0].to_dict()["capability"] == PERFORMANCE_ANALYSIS

    def test_report_policy_covers_capability_without_subject(self):
        _, events = reconcile_batch(
            [invocation(UPCOMING_EVENTS, student_id="B")], "A", DEFAULT_REGISTRY, MismatchPolicy.REPORT
        )
        assert [e.capability_name for e in events] == [UPCOMING_EVENTS]

    def test_clarification_stops_the_batch(self):
        batch = [invocation(UPCOMING_EVENTS), invocation(PERSONALIZED_ADVICE)]

        result = reconcile_batch(batch, None, DEFAULT_REGISTRY)

        assert isinstance(result, ClarificationNeeded)
        assert result.capability_name == PERSONALIZED_ADVICE
