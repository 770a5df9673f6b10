from datetime import datetime

from pydantic import Field

from app.schemas.events import CamelModel
from app.schemas.registrations import NonEmptyStr


class TeamCreate(CamelModel):
    event_id: int = Field(ge=1)
    team_name: NonEmptyStr


class TeamOut(CamelModel):
    id: int
    name: str
    team_code: str
    event_id: int
    leader_id: int
    member_ids: list[int]
    is_full: bool
    created_at: datetime | None = None
