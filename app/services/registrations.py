"""
Registration engine.

Registering validates everything up front, then reserves seats on the
event, creates the team (for team registrations) and inserts the
registration in a single transaction. The (user, event) unique constraint
is the final word on duplicates; the conditional UPDATE in
``reserve_seats`` is the final word on capacity.
"""
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from app.core.identity import Role
from app.core.locks import event_lock
from app.models.events import Event
from app.models.registrations import Registration, RegistrationType
from app.schemas.registrations import (
    IndividualRegistrationIn,
    RegistrationIn,
    RegistrationResult,
    TeamRegistrationIn,
)
from app.services.events import get_event_or_404, release_seats, reserve_seats
from app.services.teams import (
    ALREADY_IN_TEAM,
    commit_with_code_retry,
    find_led_team,
    find_membership,
    is_membership_conflict,
    new_team,
)

logger = logging.getLogger(__name__)

ALREADY_REGISTERED = "You have already registered for this event."
EVENT_FULL = "Event is full"
TEAM_DOES_NOT_FIT = "Not enough capacity for this team"

_registration_adapter = TypeAdapter(RegistrationIn)


def find_registration(db: Session, user_id: int, event_id: int) -> Registration | None:
    return db.scalar(
        select(Registration).where(Registration.user_id == user_id, Registration.event_id == event_id)
    )


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"Invalid registration details: {location}: {error['msg']}" if location else error["msg"]


def parse_registration(payload: Any) -> IndividualRegistrationIn | TeamRegistrationIn:
    """Validate a raw payload into one of the two registration shapes."""
    if not isinstance(payload, dict):
        raise InvalidInputError("Invalid registration details")
    registration_type = payload.get("type")
    if not isinstance(registration_type, str) or registration_type not in {t.value for t in RegistrationType}:
        raise InvalidInputError("Invalid registration type")
    try:
        return _registration_adapter.validate_python(payload)
    except ValidationError as exc:
        raise InvalidInputError(_describe(exc)) from exc


def _write_individual(db: Session, event: Event, user_id: int, details: IndividualRegistrationIn) -> Registration:
    reserve_seats(db, event.id, 1, EVENT_FULL)
    registration = Registration(
        user_id=user_id,
        event_id=event.id,
        registration_type=RegistrationType.INDIVIDUAL.value,
        name=details.name,
        email=details.email,
        phone=details.phone,
        participant_count=1,
    )
    db.add(registration)
    db.flush()
    return registration


def _write_team(db: Session, event: Event, user_id: int, details: TeamRegistrationIn) -> Registration:
    team = find_led_team(db, event.id, user_id)
    if team is not None:
        # team formed ahead of registering
        team.name = details.team_name
    elif find_membership(db, event.id, user_id) is not None:
        raise ConflictError(ALREADY_IN_TEAM)

    reserve_seats(db, event.id, details.seats, TEAM_DOES_NOT_FIT)
    if team is None:
        team = new_team(db, event, details.team_name, user_id)

    registration = Registration(
        user_id=user_id,
        event_id=event.id,
        registration_type=RegistrationType.TEAM.value,
        team=team,
        team_name=details.team_name,
        participants=[p.model_dump() for p in details.participants],
        participant_count=details.seats,
    )
    db.add(registration)
    db.flush()
    return registration


def register_for_event(db: Session, *, event_id: int, user_id: int, role: Role, payload: Any) -> RegistrationResult:
    event = get_event_or_404(db, event_id)
    if role == Role.ADMIN:
        raise ForbiddenError("Admins cannot register for events.")
    if find_registration(db, user_id, event_id) is not None:
        raise ConflictError(ALREADY_REGISTERED)

    details = parse_registration(payload)
    if isinstance(details, TeamRegistrationIn):
        if details.seats > event.team_size_limit:
            raise InvalidInputError(f"Team size exceeds limit of {event.team_size_limit}")
        write, full_message = _write_team, TEAM_DOES_NOT_FIT
    else:
        write, full_message = _write_individual, EVENT_FULL

    # fast fail; reserve_seats re-checks atomically
    if not event.has_room_for(details.seats):
        logger.warning("Registration rejected: event %s is full", event_id)
        raise CapacityExceededError(full_message)

    with event_lock(event_id):
        try:
            registration = commit_with_code_retry(db, lambda: write(db, event, user_id, details))
        except IntegrityError as exc:
            logger.warning("Registration of user %s for event %s hit a constraint: %s", user_id, event_id, exc.orig)
            raise ConflictError(ALREADY_IN_TEAM if is_membership_conflict(exc) else ALREADY_REGISTERED) from exc

    logger.info(
        "User %s registered for event %s (%s, %d seats)",
        user_id,
        event_id,
        registration.registration_type,
        registration.participant_count,
    )
    team = registration.team
    return RegistrationResult(
        message="Successfully registered for the event!",
        registration_id=registration.id,
        registration_type=registration.registration_type,
        team_id=team.id if team is not None else None,
        team_code=team.team_code if team is not None else None,
    )


def unregister_from_event(db: Session, *, event_id: int, user_id: int) -> None:
    """
    Drop the user's registration and return its seats. A team registration
    dissolves the team it created.
    """
    with event_lock(event_id):
        registration = find_registration(db, user_id, event_id)
        if registration is None:
            raise NotFoundError("You are not registered for this event.")

        seats = registration.participant_count
        try:
            release_seats(db, event_id, seats)
            if registration.team is not None:
                db.delete(registration.team)
            db.delete(registration)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("User %s unregistered from event %s (%d seats released)", user_id, event_id, seats)
