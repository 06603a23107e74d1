"""Database module."""
from .models import Base, Student, Grade, Event
from .connection import engine, SessionLocal, get_db, get_db_context, init_db

__all__ = [
    "Base",
    "Student",
    "Grade",
    "Event",
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "init_db",
]
