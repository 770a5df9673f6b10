from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.core.identity import CurrentUser, get_current_user
from app.database.db import get_db
from app.schemas.events import EventOut, MessageOut
from app.schemas.registrations import RegistrationResult
from app.services.queries import get_participated_events
from app.services.registrations import register_for_event, unregister_from_event

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.get("/my-registrations", response_model=list[EventOut])
def my_registrations(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return [EventOut.from_event(e) for e in get_participated_events(db, user.id)]


@router.post("/{event_id}/register", response_model=RegistrationResult, status_code=201)
def register(
    event_id: int,
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return register_for_event(db, event_id=event_id, user_id=user.id, role=user.role, payload=payload)


@router.delete("/{event_id}/unregister", response_model=MessageOut)
def unregister(event_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    unregister_from_event(db, event_id=event_id, user_id=user.id)
    return MessageOut(message="Successfully unregistered from event.")
