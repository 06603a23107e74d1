"""
API routes for the AI Schoolmate backend.
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from database import get_db
from tools import (
    create_student,
    get_student,
    student_exists,
    list_students,
    update_student,
    delete_student,
    create_grade,
    get_grade,
    list_grades,
    get_grades_by_student,
    get_grade_dynamics,
    update_grade,
    delete_grade,
    analyze_student_performance,
    compare_class_performance,
    create_event,
    get_event,
    list_events,
    update_event,
    delete_event,
    get_personalized_advice,
)
from agent import run_agent_query, get_engine
from config import settings
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
    PerformanceAnalysisResponse,
    GradeDynamicsPoint,
    ClassComparisonResponse,
    EventCreateRequest,
    EventUpdateRequest,
    EventResponse,
    AdviceResponse,
)


_protected = [Depends(require_token)]

# Router for agent endpoints
agent_router = APIRouter(prefix="/api/agent", tags=["Agent"], dependencies=_protected)

# Routers for direct record access
students_router = APIRouter(prefix="/api/students", tags=["Students"], dependencies=_protected)
grades_router = APIRouter(prefix="/api/grades", tags=["Grades"], dependencies=_protected)
events_router = APIRouter(prefix="/api/events", tags=["Events"], dependencies=_protected)
recommendations_router = APIRouter(
    prefix="/api/recommendations", tags=["Recommendations"], dependencies=_protected
)


# ============== Agent Endpoints ==============

# Plain def: the agent blocks on the reasoning engine, so FastAPI runs it in its threadpool
@agent_router.post("/ask", response_model=AgentAskResponse)
def ask_agent(request: AgentAskRequest, db: Session = Depends(get_db)):
    """
    Main agent endpoint - answer a natural-language question.

    The agent:
    1. Asks the reasoning engine which capabilities apply
    2. Scopes every capability call to the given student
    3. Runs the capabilities, tolerating individual failures
    4. Synthesizes one answer from the results
    """
    student_id = str(request.student_id) if request.student_id else None
    if student_id and not student_exists(db, student_id):
        raise HTTPException(status_code=404, detail="Student not found")

    result = run_agent_query(query=request.query, subject_id=student_id)
    return AgentAskResponse(
        message=result.text,
        source=result.source,
        status=result.status.value,
        policy_events=[event.to_dict() for event in result.policy_events],
    )


# ============== Student Endpoints ==============

@students_router.post("/", response_model=StudentResponse, status_code=201)
async def create_student_endpoint(request: StudentCreateRequest, db: Session = Depends(get_db)):
    """Create a new student."""
    return create_student(db, name=request.name, class_name=request.class_name, email=request.email)


@students_router.get("/", response_model=list[StudentResponse])
async def list_students_endpoint(class_name: Optional[str] = None, db: Session = Depends(get_db)):
    """List students. Optional query param `class_name` filters by class."""
    return list_students(db, class_name=class_name)


@students_router.get("/{student_id}", response_model=StudentResponse)
async def get_student_endpoint(student_id: UUID, db: Session = Depends(get_db)):
    """Get a student by id."""
    return get_student(db, str(student_id))


@students_router.put("/{student_id}", response_model=StudentResponse)
async def update_student_endpoint(
    student_id: UUID,
    request: StudentUpdateRequest,
    db: Session = Depends(get_db)
):
    """Update a student."""
    return update_student(db, str(student_id), **request.model_dump(exclude_none=True))


@students_router.delete("/{student_id}", status_code=204)
async def delete_student_endpoint(student_id: UUID, db: Session = Depends(get_db)):
    """Delete a student and their grades."""
    delete_student(db, str(student_id))
    return Response(status_code=204)


@students_router.get("/{student_id}/grades", response_model=list[GradeResponse])
async def get_student_grades_endpoint(student_id: UUID, db: Session = Depends(get_db)):
    """All grades of one student, newest first."""
    get_student(db, str(student_id))
    return get_grades_by_student(db, str(student_id))


# ============== Grade Endpoints ==============

@grades_router.post("/", response_model=GradeResponse, status_code=201)
async def create_grade_endpoint(request: GradeCreateRequest, db: Session = Depends(get_db)):
    """Record a new grade."""
    return create_grade(
        db,
        student_id=str(request.student_id),
        subject=request.subject,
        topic=request.topic,
        score=request.score,
        grade_date=request.grade_date,
    )


@grades_router.get("/", response_model=list[GradeResponse])
async def list_grades_endpoint(db: Session = Depends(get_db)):
    """List all grades."""
    return list_grades(db)


@grades_router.get("/analytics/student/{student_id}", response_model=PerformanceAnalysisResponse)
async def student_analytics_endpoint(student_id: UUID, db: Session = Depends(get_db)):
    """Performance analytics for a student: averages, weak subjects and topics."""
    return analyze_student_performance(db, str(student_id))


@grades_router.get("/dynamics/student/{student_id}", response_model=list[GradeDynamicsPoint])
async def student_dynamics_endpoint(
    student_id: UUID,
    subject: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Scores over time for a student, oldest first. Optional `subject` filter."""
    get_student(db, str(student_id))
    return get_grade_dynamics(db, str(student_id), subject=subject)


@grades_router.get("/comparison/class/{class_name}", response_model=ClassComparisonResponse)
async def class_comparison_endpoint(class_name: str, db: Session = Depends(get_db)):
    """Average score of every student in a class, best first."""
    data = compare_class_performance(db, class_name)
    message = None if data else f'No students or grade data found for class "{class_name}".'
    return ClassComparisonResponse(class_name=class_name, message=message, data=data)


@grades_router.get("/{grade_id}", response_model=GradeResponse)
async def get_grade_endpoint(grade_id: UUID, db: Session = Depends(get_db)):
    """Get a grade by id."""
    return get_grade(db, str(grade_id))


@grades_router.put("/{grade_id}", response_model=GradeResponse)
async def update_grade_endpoint(
    grade_id: UUID,
    request: GradeUpdateRequest,
    db: Session = Depends(get_db)
):
    """Update a grade."""
    return update_grade(db, str(grade_id), **request.model_dump(exclude_none=True))


@grades_router.delete("/{grade_id}", status_code=204)
async def delete_grade_endpoint(grade_id: UUID, db: Session = Depends(get_db)):
    """Delete a grade."""
    delete_grade(db, str(grade_id))
    return Response(status_code=204)


# ============== Event Endpoints ==============

@events_router.post("/", response_model=EventResponse, status_code=201)
async def create_event_endpoint(request: EventCreateRequest, db: Session = Depends(get_db)):
    """Create an event."""
    return create_event(db, **request.model_dump())


@events_router.get("/", response_model=list[EventResponse])
async def list_events_endpoint(
    type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    """List events, optionally filtered by type and date range."""
    return list_events(db, event_type=type, start_date=start_date, end_date=end_date)


@events_router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: UUID, db: Session = Depends(get_db)):
    """Get an event by id."""
    return get_event(db, str(event_id))


@events_router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: UUID,
    request: EventUpdateRequest,
    db: Session = Depends(get_db)
):
    """Update an event."""
    return update_event(db, str(event_id), **request.model_dump(exclude_none=True))


@events_router.delete("/{event_id}", status_code=204)
async def delete_event_endpoint(event_id: UUID, db: Session = Depends(get_db)):
    """Delete an event."""
    delete_event(db, str(event_id))
    return Response(status_code=204)


# ============== Recommendation Endpoints ==============

@recommendations_router.get("/student/{student_id}", response_model=AdviceResponse)
def student_recommendations_endpoint(student_id: UUID, db: Session = Depends(get_db)):
    """AI advice on a student's weak subjects and topics."""
    advice = get_personalized_advice(db, str(student_id), get_engine)
    return AdviceResponse(source=f"{settings.agent_source_tag} (OpenAI)", **advice)
