from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError
from app.models.events import Event
from app.models.registrations import Registration
from app.models.teams import Team
from app.services.events import get_event_or_404


def get_hosted_events(db: Session, user_id: int) -> list[Event]:
    stmt = select(Event).where(Event.created_by == user_id).order_by(Event.created_at.desc(), Event.id.desc())
    return list(db.scalars(stmt))


def get_participated_events(db: Session, user_id: int) -> list[Event]:
    """Events the user holds a registration for, most recent registration first."""
    stmt = (
        select(Event)
        .join(Registration, Registration.event_id == Event.id)
        .where(Registration.user_id == user_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def get_event_registrations(db: Session, *, event_id: int, requester_id: int) -> list[Registration]:
    event = get_event_or_404(db, event_id)
    if event.created_by != requester_id:
        raise ForbiddenError("Only the host can view registrations for this event")

    stmt = (
        select(Registration)
        .where(Registration.event_id == event_id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(db.scalars(stmt))


def get_event_stats(db: Session, event_id: int) -> dict:
    event = db.get(Event, event_id)
    if not event:
        return {}

    registrations_count = db.scalar(
        select(func.count(Registration.id)).where(Registration.event_id == event_id)
    )
    teams_count = db.scalar(select(func.count(Team.id)).where(Team.event_id == event_id))

    return {
        "event_id": event.id,
        "max_participants": event.max_participants,
        "participants_count": event.participants_count,
        "registrations_count": int(registrations_count or 0),
        "teams_count": int(teams_count or 0),
        "remaining": max(event.max_participants - event.participants_count, 0) if event.is_limited else None,
    }
