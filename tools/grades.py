"""
Grade tools: CRUD plus performance analytics.

The analytics here feed both the direct API and the agent's
performance-analysis capability.
"""
from collections import OrderedDict
from datetime import date
from typing import Dict, Any, Optional, List
from sqlalchemy.orm import Session

from database import Grade, Student
from .exceptions import NotFoundError, ValidationError
from .students import _load_student

# A subject is weak below this average, or below this share of the overall average
WEAK_SUBJECT_THRESHOLD = 70.0
WEAK_SUBJECT_RELATIVE = 0.9
# Topics use a stricter absolute threshold
WEAK_TOPIC_THRESHOLD = 60.0

GRADE_FIELDS = ("subject", "topic", "score", "grade_date")


def _validate_score(score: float):
    if score is None or not 0 <= score <= 100:
        raise ValidationError("Score must be a number between 0 and 100.", "score")


def _load_grade(db: Session, grade_id: str) -> Grade:
    grade = db.query(Grade).filter(Grade.id == grade_id).first()
    if not grade:
        raise NotFoundError("Grade", grade_id)
    return grade


def create_grade(
    db: Session,
    student_id: str,
    subject: str,
    topic: str,
    score: float,
    grade_date: date
) -> Dict[str, Any]:
    """
    Record a new grade for a student.

    Raises:
        NotFoundError: If the student does not exist
        ValidationError: If the score is outside 0-100
    """
    _validate_score(score)
    _load_student(db, student_id)

    grade = Grade(
        student_id=student_id,
        subject=subject,
        topic=topic,
        score=score,
        grade_date=grade_date,
    )
    db.add(grade)
    db.commit()
    db.refresh(grade)
    return grade.to_dict()


def get_grade(db: Session, grade_id: str) -> Dict[str, Any]:
    """Get a single grade by id."""
    return _load_grade(db, grade_id).to_dict()


def list_grades(db: Session) -> List[Dict[str, Any]]:
    """List all grades, newest first."""
    grades = db.query(Grade).order_by(Grade.grade_date.desc()).all()
    return [g.to_dict() for g in grades]


def get_grades_by_student(db: Session, student_id: str) -> List[Dict[str, Any]]:
    """
    Get all grades for a student, newest first.

    Args:
        db: Database session
        student_id: ID of the student

    Returns:
        List of grade dictionaries
    """
    grades = (
        db.query(Grade)
        .filter(Grade.student_id == student_id)
        .order_by(Grade.grade_date.desc())
        .all()
    )
    return [g.to_dict() for g in grades]


def update_grade(db: Session, grade_id: str, **changes) -> Dict[str, Any]:
    """
    Update an existing grade.

    Raises:
        NotFoundError: If the grade does not exist
        ValidationError: If no update data was provided or the score is invalid
    """
    updates = {k: v for k, v in changes.items() if k in GRADE_FIELDS and v is not None}
    if not updates:
        raise ValidationError("No update data provided")
    if "score" in updates:
        _validate_score(updates["score"])

    grade = _load_grade(db, grade_id)
    for field, value in updates.items():
        setattr(grade, field, value)

    db.commit()
    db.refresh(grade)
    return grade.to_dict()


def delete_grade(db: Session, grade_id: str) -> bool:
    """Delete a grade by id."""
    grade = _load_grade(db, grade_id)
    db.delete(grade)
    db.commit()
    return True


def get_average_score(db: Session, student_id: str, subject: Optional[str] = None) -> float:
    """
    Average score of a student, overall or for one subject.

    Returns 0 when the student has no matching grades.
    """
    query = db.query(Grade.score).filter(Grade.student_id == student_id)
    if subject:
        query = query.filter(Grade.subject == subject)
    scores = [row.score for row in query.all()]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def get_grade_dynamics(db: Session, student_id: str, subject: Optional[str] = None) -> List[Dict[str, Any]]:
    """Scores over time (oldest first), overall or for one subject."""
    query = db.query(Grade.score, Grade.grade_date).filter(Grade.student_id == student_id)
    if subject:
        query = query.filter(Grade.subject == subject)
    rows = query.order_by(Grade.grade_date.asc()).all()
    return [{"score": r.score, "grade_date": r.grade_date.isoformat()} for r in rows]


def analyze_student_performance(db: Session, student_id: str) -> Dict[str, Any]:
    """
    Analyze a student's performance by subject and topic.

    Weak subjects average below 70 or below 90% of the student's overall
    average. Weak topics average below 60. Both lists are sorted from the
    weakest up.

    Args:
        db: Database session
        student_id: ID of the student

    Returns:
        Dictionary with overall_average, subject_averages, weak_subjects,
        weak_topics and grade_count. When the student has no grades a
        dictionary with no_data=True and a message is returned instead.

    Raises:
        NotFoundError: If the student does not exist
    """
    _load_student(db, student_id)

    grades = (
        db.query(Grade)
        .filter(Grade.student_id == student_id)
        .order_by(Grade.grade_date.desc())
        .all()
    )
    if not grades:
        return {
            "no_data": True,
            "message": "No grades available for this student.",
            "weak_subjects": [],
            "weak_topics": [],
        }

    by_subject: "OrderedDict[str, List[float]]" = OrderedDict()
    by_topic: "OrderedDict[tuple, List[float]]" = OrderedDict()
    for grade in grades:
        by_subject.setdefault(grade.subject, []).append(grade.score)
        by_topic.setdefault((grade.subject, grade.topic), []).append(grade.score)

    overall = sum(g.score for g in grades) / len(grades)

    subject_averages = {}
    weak_subjects = []
    for subject, scores in by_subject.items():
        avg = sum(scores) / len(scores)
        subject_averages[subject] = round(avg, 2)
        if avg < WEAK_SUBJECT_THRESHOLD or avg < overall * WEAK_SUBJECT_RELATIVE:
            weak_subjects.append({"subject": subject, "average": avg, "details": scores})

    weak_topics = []
    for (subject, topic), scores in by_topic.items():
        avg = sum(scores) / len(scores)
        if avg < WEAK_TOPIC_THRESHOLD:
            weak_topics.append({"subject": subject, "topic": topic, "average": avg, "details": scores})

    return {
        "overall_average": round(overall, 2),
        "subject_averages": subject_averages,
        "weak_subjects": sorted(weak_subjects, key=lambda s: s["average"]),
        "weak_topics": sorted(weak_topics, key=lambda t: t["average"]),
        "grade_count": len(grades),
    }


def compare_class_performance(db: Session, class_name: str) -> List[Dict[str, Any]]:
    """
    Compare the average scores of every student in a class.

    Returns:
        List of {student_id, student_name, average_score}, best first.
        Empty when the class has no students.
    """
    students = (
        db.query(Student)
        .filter(Student.class_name == class_name)
        .order_by(Student.name.asc())
        .all()
    )

    comparison = [
        {
            "student_id": s.id,
            "student_name": s.name,
            "average_score": round(get_average_score(db, s.id), 2),
        }
        for s in students
    ]
    return sorted(comparison, key=lambda row: row["average_score"], reverse=True)
