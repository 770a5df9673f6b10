from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.identity import CurrentUser, get_current_user
from app.database.db import get_db
from app.schemas.events import MessageOut
from app.schemas.teams import TeamCreate, TeamOut
from app.services import teams as team_service

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("/create", response_model=TeamOut, status_code=201)
def create_team(payload: TeamCreate, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    team = team_service.create_team(db, event_id=payload.event_id, team_name=payload.team_name, user_id=user.id)
    return TeamOut.model_validate(team)


@router.post("/join/{team_code}", response_model=TeamOut)
def join_team(team_code: str, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    team = team_service.join_team(db, team_code=team_code, user_id=user.id)
    return TeamOut.model_validate(team)


@router.get("/my-teams", response_model=list[TeamOut])
def my_teams(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    return [TeamOut.model_validate(t) for t in team_service.get_my_teams(db, user.id)]


@router.delete("/{team_id}/remove/{member_id}", response_model=TeamOut)
def remove_member(
    team_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    team = team_service.remove_member(db, team_id=team_id, member_id=member_id, requester_id=user.id)
    return TeamOut.model_validate(team)


@router.delete("/{team_id}", response_model=MessageOut)
def delete_team(team_id: int, db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    team_service.delete_team(db, team_id=team_id, requester_id=user.id)
    return MessageOut(message="Team deleted successfully")
