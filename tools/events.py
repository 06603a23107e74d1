"""
Event tools: olympiads, competitions and school events.
"""
from datetime import date
from typing import Dict, Any, Optional, List
from sqlalchemy.orm import Session

from database import Event
from .exceptions import NotFoundError, ValidationError

EVENT_FIELDS = ("title", "description", "event_date", "type", "location", "invitation_link")


def _load_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError("Event", event_id)
    return event


def create_event(
    db: Session,
    title: str,
    event_date: date,
    type: str,
    description: Optional[str] = None,
    location: Optional[str] = None,
    invitation_link: Optional[str] = None
) -> Dict[str, Any]:
    """Create a new event."""
    event = Event(
        title=title,
        event_date=event_date,
        type=type,
        description=description,
        location=location,
        invitation_link=invitation_link,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event.to_dict()


def get_event(db: Session, event_id: str) -> Dict[str, Any]:
    """Get a single event by id."""
    return _load_event(db, event_id).to_dict()


def list_events(
    db: Session,
    event_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    List events ordered by date, with optional filters.

    Args:
        db: Database session
        event_type: Exact event type (e.g., "Olympiad")
        start_date: Earliest event date, inclusive
        end_date: Latest event date, inclusive
    """
    query = db.query(Event)
    if event_type:
        query = query.filter(Event.type == event_type)
    if start_date:
        query = query.filter(Event.event_date >= start_date)
    if end_date:
        query = query.filter(Event.event_date <= end_date)
    return [e.to_dict() for e in query.order_by(Event.event_date.asc()).all()]


def list_upcoming_events(
    db: Session,
    event_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Dict[str, Any]]:
    """
    List events from today onward (or from start_date when given).
    """
    return list_events(
        db,
        event_type=event_type,
        start_date=start_date or date.today(),
        end_date=end_date,
    )


def update_event(db: Session, event_id: str, **changes) -> Dict[str, Any]:
    """
    Update an event's fields.

    Raises:
        NotFoundError: If the event does not exist
        ValidationError: If no update data was provided
    """
    updates = {k: v for k, v in changes.items() if k in EVENT_FIELDS and v is not None}
    if not updates:
        raise ValidationError("No update data provided")

    event = _load_event(db, event_id)
    for field, value in updates.items():
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    return event.to_dict()


def delete_event(db: Session, event_id: str) -> bool:
    """Delete an event by id."""
    event = _load_event(db, event_id)
    db.delete(event)
    db.commit()
    return True
