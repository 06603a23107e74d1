"""
Student record tools.
Plain lookup/mutation functions keyed by student id.
"""
from typing import Dict, Any, Optional, List
from sqlalchemy.orm import Session

from database import Student
from .exceptions import NotFoundError, ValidationError

STUDENT_FIELDS = ("name", "class_name", "email")


def _load_student(db: Session, student_id: str) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student", student_id)
    return student


def create_student(
    db: Session,
    name: str,
    class_name: str,
    email: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a new student.

    Args:
        db: Database session
        name: Full name
        class_name: School class (e.g., "10A")
        email: Contact email (optional, unique)

    Returns:
        Created student data

    Raises:
        ValidationError: If the email is already registered
    """
    if email and db.query(Student).filter(Student.email == email).first():
        raise ValidationError(f"Email {email} is already registered", "email")

    student = Student(name=name, class_name=class_name, email=email)
    db.add(student)
    db.commit()
    db.refresh(student)
    return student.to_dict()


def get_student(db: Session, student_id: str) -> Dict[str, Any]:
    """
    Get a student by id.

    Raises:
        NotFoundError: If the student does not exist
    """
    return _load_student(db, student_id).to_dict()


def student_exists(db: Session, student_id: str) -> bool:
    """Check whether a student with the given id exists."""
    return db.query(Student.id).filter(Student.id == student_id).first() is not None


def list_students(db: Session, class_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    List students ordered by name.

    Args:
        db: Database session
        class_name: Restrict to one class (optional)
    """
    query = db.query(Student)
    if class_name:
        query = query.filter(Student.class_name == class_name)
    return [s.to_dict() for s in query.order_by(Student.name.asc()).all()]


def update_student(db: Session, student_id: str, **changes) -> Dict[str, Any]:
    """
    Update a student's fields.

    Only name, class_name and email may be changed.

    Raises:
        NotFoundError: If the student does not exist
        ValidationError: If no valid fields were supplied
    """
    updates = {k: v for k, v in changes.items() if k in STUDENT_FIELDS and v is not None}
    if not updates:
        raise ValidationError("No update data provided")

    student = _load_student(db, student_id)
    for field, value in updates.items():
        setattr(student, field, value)

    db.commit()
    db.refresh(student)
    return student.to_dict()


def delete_student(db: Session, student_id: str) -> bool:
    """
    Delete a student and, by cascade, their grades.

    Raises:
        NotFoundError: If the student does not exist
    """
    student = _load_student(db, student_id)
    db.delete(student)
    db.commit()
    return True
