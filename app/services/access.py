"""Staff authorization against events.

crew: explicit grant in crew_event_access. organizer: event.created_by. admin: everything.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.errors import AccessDenied, NotFound
from app.models.event import CrewEventAccess, Event
from app.models.user import UserRole


@dataclass(frozen=True)
class StaffContext:
    """Explicit caller identity passed into every staff-side operation."""
    user_id: int
    role: UserRole


def has_crew_grant(db: Session, crew_user_id: int, event_id: int) -> bool:
    return (
        db.query(CrewEventAccess.id)
        .filter(CrewEventAccess.crew_user_id == crew_user_id, CrewEventAccess.event_id == event_id)
        .first()
        is not None
    )


def can_access_event(db: Session, staff: StaffContext, event: Event) -> bool:
    if staff.role == UserRole.admin:
        return True
    if staff.role == UserRole.organizer:
        return event.created_by == staff.user_id
    if staff.role == UserRole.crew:
        return has_crew_grant(db, staff.user_id, event.id)
    return False


def require_event_access(db: Session, staff: StaffContext, event_id: int) -> Event:
    """Load the event and check the caller may act on it. Crew grants are checked
    before existence so crew cannot probe for events they were never given."""
    if staff.role == UserRole.crew and not has_crew_grant(db, staff.user_id, event_id):
        raise AccessDenied("You do not have access to this event")
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFound("Event not found")
    if not can_access_event(db, staff, event):
        raise AccessDenied("You do not have access to this event")
    return event


def accessible_event_ids(db: Session, staff: StaffContext) -> list[int] | None:
    """Event ids the caller may see; None means all events (admin)."""
    if staff.role == UserRole.admin:
        return None
    if staff.role == UserRole.organizer:
        return [row.id for row in db.query(Event.id).filter(Event.created_by == staff.user_id).all()]
    if staff.role == UserRole.crew:
        return [
            row.event_id
            for row in db.query(CrewEventAccess.event_id).filter(CrewEventAccess.crew_user_id == staff.user_id).all()
        ]
    return []
