import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base


class RegistrationType(str, enum.Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    registration_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RegistrationType.INDIVIDUAL.value
    )

    # individual contact snapshot
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # team snapshot
    team_id: Mapped[int | None] = mapped_column(ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    team_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    participants: Mapped[list[dict] | None] = mapped_column(JSON, nullable=True)

    # people this registration added to events.participants_count
    participant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    event: Mapped["Event"] = relationship(back_populates="registrations")
    team: Mapped[Optional["Team"]] = relationship(back_populates="registration")

    @property
    def is_team(self) -> bool:
        return self.registration_type == RegistrationType.TEAM.value
