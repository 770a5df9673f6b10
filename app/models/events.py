from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.config import DEFAULT_MAX_TEAM_SIZE
from app.database.db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    created_by: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    # 0 means unlimited
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_team_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_team_size: Mapped[int | None] = mapped_column(Integer, nullable=True, default=DEFAULT_MAX_TEAM_SIZE)
    participants_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    registrations: Mapped[list["Registration"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )
    teams: Mapped[list["Team"]] = relationship(back_populates="event", cascade="all, delete-orphan")

    @property
    def team_size_limit(self) -> int:
        return self.max_team_size or DEFAULT_MAX_TEAM_SIZE

    @property
    def is_limited(self) -> bool:
        return self.max_participants > 0

    def has_room_for(self, seats: int) -> bool:
        return not self.is_limited or self.participants_count + seats <= self.max_participants
