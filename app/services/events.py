import logging

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import CapacityExceededError, ForbiddenError, InvalidInputError, NotFoundError
from app.core.locks import event_lock
from app.models.events import Event
from app.models.registrations import Registration, RegistrationType
from app.models.teams import TeamMember
from app.schemas.events import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def reserve_seats(db: Session, event_id: int, seats: int, message: str = "Event is full") -> None:
    """
    Add ``seats`` to the event's participants_count in one conditional UPDATE.

    The row only matches while the event is unlimited or still has room, so
    two writers can never both push the count past max_participants.
    """
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .where(
            or_(
                Event.max_participants == 0,
                Event.participants_count + seats <= Event.max_participants,
            )
        )
        .values(participants_count=Event.participants_count + seats)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise CapacityExceededError(message)


def release_seats(db: Session, event_id: int, seats: int) -> None:
    """Give back seats taken by a registration, never dropping below zero."""
    stmt = (
        update(Event)
        .where(Event.id == event_id)
        .values(
            participants_count=case(
                (Event.participants_count >= seats, Event.participants_count - seats),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )
    db.execute(stmt)


def create_event(db: Session, *, creator_id: int, data: EventCreate) -> Event:
    event = Event(
        title=data.title,
        created_by=creator_id,
        max_participants=data.max_participants,
        is_team_event=data.is_team_event,
        participants_count=0,
    )
    if data.max_team_size is not None:
        event.max_team_size = data.max_team_size
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s created by user %s", event.id, creator_id)
    return event


def list_events(db: Session) -> list[Event]:
    return list(db.scalars(select(Event).order_by(Event.created_at.desc(), Event.id.desc())))


def _get_hosted_event(db: Session, event_id: int, requester_id: int, action: str) -> Event:
    event = get_event_or_404(db, event_id)
    if event.created_by != requester_id:
        raise ForbiddenError(f"Only the host can {action} this event")
    return event


def _largest_team_size(db: Session, event_id: int) -> int:
    """Largest team on the event, counting both joined members and registered participants."""
    team_sizes = (
        select(func.count(TeamMember.id).label("size"))
        .where(TeamMember.event_id == event_id)
        .group_by(TeamMember.team_id)
        .subquery()
    )
    members = db.scalar(select(func.max(team_sizes.c.size)))
    participants = db.scalar(
        select(func.max(Registration.participant_count)).where(
            Registration.event_id == event_id,
            Registration.registration_type == RegistrationType.TEAM.value,
        )
    )
    return max(int(members or 0), int(participants or 0))


def update_event(db: Session, *, event_id: int, requester_id: int, data: EventUpdate) -> Event:
    event = _get_hosted_event(db, event_id, requester_id, "update")

    with event_lock(event_id):
        db.refresh(event)
        if data.max_participants is not None:
            if 0 < data.max_participants < event.participants_count:
                raise InvalidInputError(
                    f"maxParticipants cannot be lower than the {event.participants_count} people already registered"
                )
            event.max_participants = data.max_participants
        if data.is_team_event is not None:
            event.is_team_event = data.is_team_event
        if data.max_team_size is not None:
            largest = _largest_team_size(db, event_id)
            if largest > data.max_team_size:
                raise InvalidInputError(
                    f"maxTeamSize cannot be lower than the largest existing team of {largest}"
                )
            event.max_team_size = data.max_team_size
        db.commit()

    db.refresh(event)
    return event


def delete_event(db: Session, *, event_id: int, requester_id: int) -> None:
    """Delete an event together with its registrations and teams."""
    event = _get_hosted_event(db, event_id, requester_id, "delete")
    with event_lock(event_id):
        db.delete(event)
        db.commit()
    logger.info("Event %s deleted by user %s", event_id, requester_id)


def reconcile_participants_count(db: Session, event_id: int) -> int | None:
    """Recompute participants_count from the stored registrations."""
    event = db.get(Event, event_id)
    if event is None:
        return None

    with event_lock(event_id):
        total = db.scalar(
            select(func.coalesce(func.sum(Registration.participant_count), 0)).where(
                Registration.event_id == event_id
            )
        )
        total = int(total or 0)
        db.refresh(event)
        if event.participants_count != total:
            logger.warning(
                "participants_count drift on event %s: stored=%s actual=%s",
                event_id,
                event.participants_count,
                total,
            )
            event.participants_count = total
        db.commit()
    return total
