import logging
import secrets
import string
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import TEAM_CODE_LENGTH, TEAM_CODE_MAX_ATTEMPTS
from app.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from app.core.locks import event_lock
from app.models.events import Event
from app.models.teams import Team, TeamMember
from app.services.events import get_event_or_404, release_seats

logger = logging.getLogger(__name__)

T = TypeVar("T")

# url-safe, same alphabet as nanoid
TEAM_CODE_ALPHABET = string.ascii_letters + string.digits + "_-"

ALREADY_IN_TEAM = "You are already part of another team for this event"


def generate_team_code(db: Session) -> str:
    for _ in range(TEAM_CODE_MAX_ATTEMPTS):
        code = "".join(secrets.choice(TEAM_CODE_ALPHABET) for _ in range(TEAM_CODE_LENGTH))
        if db.scalar(select(Team.id).where(Team.team_code == code)) is None:
            return code
    raise ConflictError("Could not allocate a unique team code, please try again.")


def is_team_code_collision(exc: IntegrityError) -> bool:
    return "team_code" in str(exc.orig)


def is_membership_conflict(exc: IntegrityError) -> bool:
    return "team_members" in str(exc.orig)


def commit_with_code_retry(db: Session, write: Callable[[], T]) -> T:
    """
    Run ``write`` and commit, retrying the whole transaction when the team
    code it picked was taken by a concurrent writer.

    Any other IntegrityError is re-raised for the caller to map.
    """
    for attempt in range(1, TEAM_CODE_MAX_ATTEMPTS + 1):
        try:
            result = write()
            db.commit()
            return result
        except IntegrityError as exc:
            db.rollback()
            if not is_team_code_collision(exc):
                raise
            logger.info("Team code collision, retrying (attempt %d)", attempt)
        except Exception:
            db.rollback()
            raise
    raise ConflictError("Could not allocate a unique team code, please try again.")


def find_membership(db: Session, event_id: int, user_id: int) -> TeamMember | None:
    return db.scalar(
        select(TeamMember).where(TeamMember.event_id == event_id, TeamMember.user_id == user_id)
    )


def find_led_team(db: Session, event_id: int, user_id: int) -> Team | None:
    return db.scalar(select(Team).where(Team.event_id == event_id, Team.leader_id == user_id))


def new_team(db: Session, event: Event, name: str, leader_id: int) -> Team:
    """Add a team whose only member is its leader. Caller commits."""
    team = Team(
        name=name,
        team_code=generate_team_code(db),
        event_id=event.id,
        leader_id=leader_id,
    )
    team.members.append(TeamMember(event_id=event.id, user_id=leader_id))
    db.add(team)
    db.flush()
    return team


def create_team(db: Session, *, event_id: int, team_name: str, user_id: int) -> Team:
    event = get_event_or_404(db, event_id)
    if not event.is_team_event:
        raise InvalidInputError("This event does not allow team registration")
    if find_led_team(db, event_id, user_id) is not None:
        raise ConflictError("You already created a team for this event")
    if find_membership(db, event_id, user_id) is not None:
        raise ConflictError(ALREADY_IN_TEAM)

    with event_lock(event_id):
        try:
            team = commit_with_code_retry(db, lambda: new_team(db, event, team_name, user_id))
        except IntegrityError as exc:
            raise ConflictError(ALREADY_IN_TEAM) from exc

    logger.info("Team %s (%s) created for event %s by user %s", team.id, team.team_code, event_id, user_id)
    return team


def join_team(db: Session, *, team_code: str, user_id: int) -> Team:
    team = db.scalar(select(Team).where(Team.team_code == team_code))
    if team is None:
        raise NotFoundError("Invalid team code")
    event_id = team.event_id

    with event_lock(event_id):
        db.refresh(team)
        if team.has_member(user_id):
            raise ConflictError("You already joined this team")
        if find_membership(db, event_id, user_id) is not None:
            raise ConflictError(ALREADY_IN_TEAM)
        if team.is_full:
            raise CapacityExceededError("Team is already full")

        team.members.append(TeamMember(event_id=event_id, user_id=user_id))
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError(ALREADY_IN_TEAM) from exc

    logger.info("User %s joined team %s", user_id, team.id)
    return team


def _get_led_team(db: Session, team_id: int, requester_id: int, message: str) -> Team:
    team = db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    if team.leader_id != requester_id:
        raise ForbiddenError(message)
    return team


def remove_member(db: Session, *, team_id: int, member_id: int, requester_id: int) -> Team:
    team = _get_led_team(db, team_id, requester_id, "Only team leader can remove members")

    membership = next((m for m in team.members if m.user_id == member_id), None)
    if membership is None:
        raise InvalidInputError("Member not in this team")
    if member_id == team.leader_id:
        raise InvalidInputError("Leader cannot remove themselves")

    team.members.remove(membership)
    db.commit()
    logger.info("User %s removed from team %s", member_id, team_id)
    return team


def delete_team(db: Session, *, team_id: int, requester_id: int) -> None:
    """
    Delete a team. A registered team takes its registration with it and
    hands its seats back to the event.
    """
    team = _get_led_team(db, team_id, requester_id, "Only leader can delete this team")
    event_id = team.event_id

    with event_lock(event_id):
        try:
            registration = team.registration
            if registration is not None:
                release_seats(db, event_id, registration.participant_count)
                db.delete(registration)
            db.delete(team)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("Team %s deleted by user %s", team_id, requester_id)


def get_my_teams(db: Session, user_id: int) -> list[Team]:
    stmt = (
        select(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .where(TeamMember.user_id == user_id)
        .order_by(Team.created_at.desc(), Team.id.desc())
    )
    return list(db.scalars(stmt))
