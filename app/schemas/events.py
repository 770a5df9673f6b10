from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ---------- Event ----------
class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    max_participants: int = Field(default=0, ge=0)
    is_team_event: bool = False
    max_team_size: int | None = Field(default=None, ge=2)


class EventUpdate(CamelModel):
    """Capacity fields only; content edits live outside this service."""

    max_participants: int | None = Field(default=None, ge=0)
    is_team_event: bool | None = None
    max_team_size: int | None = Field(default=None, ge=2)


class EventOut(CamelModel):
    id: int
    title: str
    created_by: int
    max_participants: int
    is_team_event: bool
    max_team_size: int | None
    participants_count: int
    current_participants: int
    type: str
    created_at: datetime | None = None

    @classmethod
    def from_event(cls, event) -> "EventOut":
        return cls(
            id=event.id,
            title=event.title,
            created_by=event.created_by,
            max_participants=event.max_participants,
            is_team_event=event.is_team_event,
            max_team_size=event.team_size_limit,
            participants_count=event.participants_count,
            current_participants=event.participants_count or 0,
            type="team" if event.is_team_event else "individual",
            created_at=event.created_at,
        )


class EventStatsOut(CamelModel):
    event_id: int
    max_participants: int
    participants_count: int
    registrations_count: int
    teams_count: int
    remaining: int | None


class MessageOut(CamelModel):
    message: str
