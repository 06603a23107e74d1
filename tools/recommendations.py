"""
Personalized study advice built from a student's performance analysis.
"""
import json
import logging
from typing import Any, Callable, Dict, List
from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser
from sqlalchemy.orm import Session

from .grades import analyze_student_performance, get_grades_by_student
from .students import get_student

logger = logging.getLogger(__name__)

RECENT_GRADES_LIMIT = 5

FALLBACK_ADVICE = (
    "We could not prepare specific advice this time, but remember: regular review, "
    "active participation in class and asking questions are the keys to success."
)
FALLBACK_VISUAL = "Build mind maps or flowcharts to see how the topics connect."


def _build_advice_prompt(student_name: str, analysis: Dict[str, Any], recent: List[Dict[str, Any]]) -> str:
    """Prompt asking the model for structured improvement advice."""
    lines = [
        'You are "AI Schoolmate", a school assistant. Give personalized, helpful and safe '
        f"advice to a student named {student_name} on improving their results.",
        f"Overall average: {analysis['overall_average']:.2f}.",
    ]
    if analysis["weak_subjects"]:
        subjects = ", ".join(f"{s['subject']} ({s['average']:.2f})" for s in analysis["weak_subjects"])
        lines.append(f"Subjects that need improvement (average): {subjects}.")
    if analysis["weak_topics"]:
        topics = ", ".join(
            f"{t['topic']} in {t['subject']} (average: {t['average']:.2f})" for t in analysis["weak_topics"]
        )
        lines.append(f"Topics that need particular attention: {topics}.")
    lines.append(f"Most recent grades: {json.dumps(recent)}.")
    lines.append(
        "\nWrite concrete, actionable advice and suggest how visual material (charts, diagrams) "
        "could help understanding. Answer ONLY with JSON in this format:\n"
        "{\n"
        '  "type": "grade_improvement",\n'
        '  "subject": "subject name if the advice is about one subject, otherwise null",\n'
        '  "topic": "topic name if the advice is about one topic, otherwise null",\n'
        '  "advice": "detailed advice, at most 200 words",\n'
        '  "visual_suggestion": "visual aid suggestion, at most 50 words"\n'
        "}"
    )
    return "\n".join(lines)


def parse_advice(raw: str) -> Dict[str, Any]:
    """
    Parse the model's advice reply.

    Falls back to generic advice that embeds the raw reply when the
    reply is not a JSON object with an "advice" field.
    """
    try:
        parsed = JsonOutputParser().parse(raw)
    except OutputParserException:
        parsed = None

    if not isinstance(parsed, dict) or not parsed.get("advice"):
        logger.warning("Advice reply was not valid JSON, using generic advice")
        return {
            "type": "general_advice",
            "subject": None,
            "topic": None,
            "advice": f"{FALLBACK_ADVICE} {raw}".strip(),
            "visual_suggestion": FALLBACK_VISUAL,
        }

    return {
        "type": parsed.get("type", "grade_improvement"),
        "subject": parsed.get("subject"),
        "topic": parsed.get("topic"),
        "advice": parsed["advice"],
        "visual_suggestion": parsed.get("visual_suggestion") or FALLBACK_VISUAL,
    }


def get_personalized_advice(db: Session, student_id: str, engine_provider: Callable[[], Any]) -> Dict[str, Any]:
    """
    Produce personalized advice for a student.

    Args:
        db: Database session
        student_id: ID of the student
        engine_provider: Returns the reasoning engine; only called when advice
            has to be drafted, so the no-grades and no-weakness paths work
            without a configured engine

    Returns:
        Dictionary with type, subject, topic, advice and visual_suggestion

    Raises:
        NotFoundError: If the student does not exist
        ServiceUnavailableError: If the reasoning engine is unavailable or fails
    """
    student = get_student(db, student_id)
    analysis = analyze_student_performance(db, student_id)

    if analysis.get("no_data"):
        return {
            "type": "getting_started",
            "subject": None,
            "topic": None,
            "advice": (
                f"{student['name']}, there are no grades recorded yet. Once a few grades are in, "
                "I can point out which subjects and topics deserve extra attention."
            ),
            "visual_suggestion": "Keep a simple progress chart and add each new grade to it.",
        }

    if not analysis["weak_subjects"] and not analysis["weak_topics"]:
        return {
            "type": "general_excellence_advice",
            "subject": None,
            "topic": None,
            "advice": (
                f"Great work, {student['name']}! Your grades show strong knowledge across all areas. "
                "Keep it up, stay active in class and don't be afraid to take on new challenges."
            ),
            "visual_suggestion": "Use progress charts to track your results and set new goals.",
        }

    recent = [
        {"subject": g["subject"], "topic": g["topic"], "score": g["score"], "date": g["grade_date"]}
        for g in get_grades_by_student(db, student_id)[:RECENT_GRADES_LIMIT]
    ]
    prompt = _build_advice_prompt(student["name"], analysis, recent)
    return parse_advice(engine_provider().advise(prompt))
