from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base


class Team(Base):
    __tablename__ = "teams"
    __table_args__ = (UniqueConstraint("team_code", name="uq_teams_team_code"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    team_code: Mapped[str] = mapped_column(String(16), nullable=False)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    leader_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    event: Mapped["Event"] = relationship(back_populates="teams")
    members: Mapped[list["TeamMember"]] = relationship(
        back_populates="team", cascade="all, delete-orphan", order_by="TeamMember.id"
    )
    registration: Mapped[Optional["Registration"]] = relationship(back_populates="team", uselist=False)

    @property
    def member_ids(self) -> list[int]:
        return [m.user_id for m in self.members]

    def has_member(self, user_id: int) -> bool:
        return user_id in self.member_ids

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.event.team_size_limit


class TeamMember(Base):
    __tablename__ = "team_members"
    # one team per user per event
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_team_members_event_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    team: Mapped["Team"] = relationship(back_populates="members")
