import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.identity import CurrentUser, get_current_user
from app.database.db import get_db
from app.schemas.events import EventCreate, EventOut, EventStatsOut, EventUpdate, MessageOut
from app.schemas.registrations import RegistrationOut, RegistrationResult
from app.services import events as event_service
from app.services.queries import (
    get_event_registrations,
    get_event_stats,
    get_hosted_events,
    get_participated_events,
)
from app.services.registrations import register_for_event
from app.tasks import reconcile_participants_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=201)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    event = event_service.create_event(db, creator_id=user.id, data=payload)
    return EventOut.from_event(event)


@router.get("", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    return [EventOut.from_event(e) for e in event_service.list_events(db)]


@router.get("/hosted", response_model=list[EventOut])
def hosted_events(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return [EventOut.from_event(e) for e in get_hosted_events(db, user.id)]


@router.get("/participated", response_model=list[EventOut])
def participated_events(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return [EventOut.from_event(e) for e in get_participated_events(db, user.id)]


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    event = event_service.update_event(db, event_id=event_id, requester_id=user.id, data=payload)
    return EventOut.from_event(event)


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(event_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    event_service.delete_event(db, event_id=event_id, requester_id=user.id)
    return MessageOut(message="Event deleted successfully")


@router.post("/{event_id}/register", response_model=RegistrationResult, status_code=201)
def register(
    event_id: int,
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return register_for_event(db, event_id=event_id, user_id=user.id, role=user.role, payload=payload)


@router.get("/{event_id}/registrations", response_model=list[RegistrationOut])
def event_registrations(event_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    registrations = get_event_registrations(db, event_id=event_id, requester_id=user.id)
    return [RegistrationOut.from_registration(r) for r in registrations]


@router.get("/{event_id}/stats", response_model=EventStatsOut)
def event_stats(event_id: int, db: Session = Depends(get_db)):
    stats = get_event_stats(db, event_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Event not found")
    return stats


@router.post("/{event_id}/reconcile", response_model=MessageOut, status_code=202)
def reconcile(event_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    event = event_service.get_event_or_404(db, event_id)
    if event.created_by != user.id:
        raise HTTPException(status_code=403, detail="Only the host can reconcile this event")

    # enqueue durable background work; fall back to running inline when no broker is reachable
    try:
        reconcile_participants_task.delay(event_id)
    except Exception:
        logger.warning("Could not enqueue reconcile for event %s, running inline", event_id, exc_info=True)
        event_service.reconcile_participants_count(db, event_id)
    return MessageOut(message="Participant count reconciliation scheduled")


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return EventOut.from_event(event_service.get_event_or_404(db, event_id))
