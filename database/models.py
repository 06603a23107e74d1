"""
Database models for the AI Schoolmate backend.
Defines the SQLAlchemy models for students, grades and events.
"""
import uuid
from sqlalchemy import Column, String, Float, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Student(Base):
    """
    Students table.

    Attributes:
        id: UUID identifier
        name: Student's full name
        class_name: School class the student belongs to (e.g., "10A")
        email: Contact email (optional)
        created_at: Creation timestamp
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    class_name = Column("class", String(50), nullable=False, index=True)
    email = Column(String(255), nullable=True, unique=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    grades = relationship("Grade", back_populates="student", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Student(id='{self.id}', name='{self.name}', class='{self.class_name}')>"

    def to_dict(self):
        """Convert student to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "class_name": self.class_name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Grade(Base):
    """
    Grades table.

    Attributes:
        id: UUID identifier
        student_id: Student who received the grade
        subject: Subject name (e.g., "Math")
        topic: Topic within the subject (e.g., "Fractions")
        score: Grade value, 0-100
        grade_date: Date of the evaluation
    """
    __tablename__ = "grades"

    id = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    topic = Column(String(255), nullable=False)
    score = Column(Float, nullable=False)
    grade_date = Column(Date, nullable=False)

    student = relationship("Student", back_populates="grades")

    def __repr__(self):
        return f"<Grade(id='{self.id}', student_id='{self.student_id}', subject='{self.subject}', score={self.score})>"

    def to_dict(self):
        """Convert grade to dictionary for API responses."""
        return {
            "id": self.id,
            "student_id": self.student_id,
            "subject": self.subject,
            "topic": self.topic,
            "score": self.score,
            "grade_date": self.grade_date.isoformat() if self.grade_date else None,
        }


class Event(Base):
    """
    Events table - olympiads, competitions and school events.

    Attributes:
        id: UUID identifier
        title: Event title
        description: Longer description (optional)
        event_date: Date the event takes place
        type: Event type (e.g., "Olympiad", "Competition", "School Event")
        location: Where it takes place (optional)
        invitation_link: Registration or details link (optional)
    """
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False, index=True)
    type = Column(String(100), nullable=False)
    location = Column(String(255), nullable=True)
    invitation_link = Column(String(512), nullable=True)

    def __repr__(self):
        return f"<Event(id='{self.id}', title='{self.title}', date={self.event_date})>"

    def to_dict(self):
        """Convert event to dictionary for API responses."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date.isoformat() if self.event_date else None,
            "type": self.type,
            "location": self.location,
            "invitation_link": self.invitation_link,
        }
