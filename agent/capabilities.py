"""
Default capability handlers: domain-service calls plus result rendering.
"""
from typing import Any, Callable, Dict, List, Mapping

from database import get_db_context
from tools import analyze_student_performance, get_personalized_advice, list_upcoming_events
from .dispatcher import CapabilityHandler
from .registry import (
    PERFORMANCE_ANALYSIS,
    PERSONALIZED_ADVICE,
    STUDENT_ID_PARAM,
    UPCOMING_EVENTS,
)

NO_EVENTS_MESSAGE = "No upcoming events or olympiads match your request."


def render_performance(result: Mapping[str, Any]) -> str:
    """Performance analytics as a short report."""
    lines = ["### Performance analysis:"]
    if result.get("no_data"):
        lines.append(result.get("message") or "No grades available for this student.")
        return "\n".join(lines)

    lines.append(f"Overall average: {result['overall_average']:.2f}.")

    weak_subjects = result.get("weak_subjects") or []
    if weak_subjects:
        subjects = ", ".join(f"{s['subject']} (average: {s['average']:.2f})" for s in weak_subjects)
        lines.append(f"Weak subjects: {subjects}.")

    weak_topics = result.get("weak_topics") or []
    if weak_topics:
        topics = ", ".join(
            f"{t['topic']} in {t['subject']} (average: {t['average']:.2f})" for t in weak_topics
        )
        lines.append(f"Weak topics: {topics}.")

    lines.append(f"Total grades: {result.get('grade_count', 0)}.")
    return "\n".join(lines)


def render_events(events: List[Mapping[str, Any]]) -> str:
    """Upcoming events as a bulleted list."""
    if not events:
        return NO_EVENTS_MESSAGE

    lines = ["### Upcoming events/olympiads:"]
    for event in events:
        lines.append(
            f"- **{event['title']}** ({event['type']}) {event['event_date']} "
            f"at {event.get('location') or 'location not specified'}. "
            f"Details: {event.get('invitation_link') or 'no link'}"
        )
    return "\n".join(lines)


def render_advice(advice: Mapping[str, Any]) -> str:
    """Personalized advice with its subject, topic and visual aid."""
    return "\n".join([
        "### Personalized advice for improving results:",
        f"**Subject:** {advice.get('subject') or 'General'}",
        f"**Topic:** {advice.get('topic') or 'General'}",
        f"**Advice:** {advice['advice']}",
        f"**Visual suggestion:** {advice.get('visual_suggestion') or 'none'}",
    ])


def build_default_handlers(engine, session_context: Callable = get_db_context) -> Dict[str, CapabilityHandler]:
    """
    Handlers for the default registry.

    Each call opens its own database session, so handlers are safe to run
    on separate threads.

    Args:
        engine: Reasoning engine used by the advice capability
        session_context: Context manager factory yielding a database session
    """

    def performance(args: Mapping[str, Any]):
        with session_context() as db:
            return analyze_student_performance(db, args[STUDENT_ID_PARAM])

    def upcoming_events(args: Mapping[str, Any]):
        with session_context() as db:
            return list_upcoming_events(db, event_type=args.get("type") or None)

    def advice(args: Mapping[str, Any]):
        with session_context() as db:
            return get_personalized_advice(db, args[STUDENT_ID_PARAM], lambda: engine)

    return {
        PERFORMANCE_ANALYSIS: CapabilityHandler(execute=performance, render=render_performance),
        UPCOMING_EVENTS: CapabilityHandler(execute=upcoming_events, render=render_events),
        PERSONALIZED_ADVICE: CapabilityHandler(execute=advice, render=render_advice),
    }
