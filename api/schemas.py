"""
Pydantic schemas for API requests and responses.
"""
from datetime import date
from typing import Optional, List, Dict, Any
from uuid import UUID
from pydantic import BaseModel, Field


# Agent
class AgentAskRequest(BaseModel):
    """Request to the agent endpoint."""
    query: str = Field(..., description="User's natural-language question")
    student_id: Optional[UUID] = Field(None, description="Student the question is about")


class PolicyEventResponse(BaseModel):
    capability: str
    kind: str
    detail: str


class AgentAskResponse(BaseModel):
    """Response from the agent."""
    message: str = Field(..., description="Agent's answer text")
    source: str = Field(..., description="Tag identifying an agent-produced answer")
    status: str = Field(..., description="'answered' or 'clarification'")
    policy_events: List[PolicyEventResponse] = Field(default_factory=list)


# Students
class StudentCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    class_name: str = Field(..., min_length=1, description="School class, e.g. '10A'")
    email: Optional[str] = None


class StudentUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    class_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None


class StudentResponse(BaseModel):
    id: str
    name: str
    class_name: str
    email: Optional[str]
    created_at: Optional[str]


# Grades
class GradeCreateRequest(BaseModel):
    student_id: UUID
    subject: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=100, description="Grade value (0-100)")
    grade_date: date


class GradeUpdateRequest(BaseModel):
    subject: Optional[str] = Field(None, min_length=1)
    topic: Optional[str] = Field(None, min_length=1)
    score: Optional[float] = Field(None, ge=0, le=100)
    grade_date: Optional[date] = None


class GradeResponse(BaseModel):
    id: str
    student_id: str
    subject: str
    topic: str
    score: float
    grade_date: str


class PerformanceAnalysisResponse(BaseModel):
    """Performance analytics; only no_data/message are set when there are no grades."""
    no_data: bool = False
    message: Optional[str] = None
    overall_average: Optional[float] = None
    subject_averages: Dict[str, float] = Field(default_factory=dict)
    weak_subjects: List[Dict[str, Any]] = Field(default_factory=list)
    weak_topics: List[Dict[str, Any]] = Field(default_factory=list)
    grade_count: int = 0


class GradeDynamicsPoint(BaseModel):
    score: float
    grade_date: str


class ClassComparisonEntry(BaseModel):
    student_id: str
    student_name: str
    average_score: float


class ClassComparisonResponse(BaseModel):
    class_name: str
    message: Optional[str] = None
    data: List[ClassComparisonEntry]


# Events
class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    event_date: date
    type: str = Field(..., min_length=1, description="e.g. 'Olympiad', 'Competition'")
    description: Optional[str] = None
    location: Optional[str] = None
    invitation_link: Optional[str] = None


class EventUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    event_date: Optional[date] = None
    type: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    invitation_link: Optional[str] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    event_date: str
    type: str
    location: Optional[str]
    invitation_link: Optional[str]


# Recommendations
class AdviceResponse(BaseModel):
    source: str
    type: str
    subject: Optional[str]
    topic: Optional[str]
    advice: str
    visual_suggestion: str


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
    error_type: Optional[str]
