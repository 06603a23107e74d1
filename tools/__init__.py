"""
Tools module for the AI Schoolmate backend.

Domain services over the persistent store. The agent calls a subset of
these as capabilities; the API exposes all of them directly.
"""
from .exceptions import (
    NotFoundError,
    ValidationError,
)

from .students import (
    create_student,
    get_student,
    student_exists,
    list_students,
    update_student,
    delete_student,
)

from .grades import (
    create_grade,
    get_grade,
    list_grades,
    get_grades_by_student,
    update_grade,
    delete_grade,
    get_average_score,
    get_grade_dynamics,
    analyze_student_performance,
    compare_class_performance,
)

from .events import (
    create_event,
    get_event,
    list_events,
    list_upcoming_events,
    update_event,
    delete_event,
)

from .recommendations import (
    get_personalized_advice,
    parse_advice,
)

__all__ = [
    # Exceptions
    "NotFoundError",
    "ValidationError",
    # Students
    "create_student",
    "get_student",
    "student_exists",
    "list_students",
    "update_student",
    "delete_student",
    # Grades
    "create_grade",
    "get_grade",
    "list_grades",
    "get_grades_by_student",
    "update_grade",
    "delete_grade",
    "get_average_score",
    "get_grade_dynamics",
    "analyze_student_performance",
    "compare_class_performance",
    # Events
    "create_event",
    "get_event",
    "list_events",
    "list_upcoming_events",
    "update_event",
    "delete_event",
    # Recommendations
    "get_personalized_advice",
    "parse_advice",
]
