"""API module for the AI Schoolmate backend."""
from .routes import (
    agent_router,
    students_router,
    grades_router,
    events_router,
    recommendations_router,
)
from .auth import require_token
from .schemas import (
    AgentAskRequest,
    AgentAskResponse,
    StudentCreateRequest,
    StudentUpdateRequest,
    StudentResponse,
    GradeCreateRequest,
    GradeUpdateRequest,
    GradeResponse,
    EventCreateRequest,
    EventUpdateRequest,
    EventResponse,
    AdviceResponse,
    ErrorResponse,
)

__all__ = [
    "agent_router",
    "students_router",
    "grades_router",
    "events_router",
    "recommendations_router",
    "require_token",
    "AgentAskRequest",
    "AgentAskResponse",
    "StudentCreateRequest",
    "StudentUpdateRequest",
    "StudentResponse",
    "GradeCreateRequest",
    "GradeUpdateRequest",
    "GradeResponse",
    "EventCreateRequest",
    "EventUpdateRequest",
    "EventResponse",
    "AdviceResponse",
    "ErrorResponse",
]
