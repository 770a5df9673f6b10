"""
Test event capacity updates.
"""
import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, InvalidInputError
from app.core.identity import Role
from app.schemas.events import EventUpdate
from app.services.events import update_event
from app.services.registrations import register_for_event
from app.services.teams import create_team, join_team


class TestUpdateEvent:
    def test_lower_team_size_below_joined_team_rejected(self, db_session: Session, make_event):
        event = make_event(created_by=1, is_team_event=True, max_team_size=4)
        team = create_team(db_session, event_id=event.id, team_name="Quartet", user_id=10)
        for user_id in (11, 12, 13):
            join_team(db_session, team_code=team.team_code, user_id=user_id)

        with pytest.raises(InvalidInputError, match="maxTeamSize"):
            update_event(db_session, event_id=event.id, requester_id=1, data=EventUpdate(max_team_size=2))

        db_session.refresh(event)
        assert event.max_team_size == 4

    def test_lower_team_size_below_registered_team_rejected(self, db_session: Session, make_event, team_payload):
        event = make_event(created_by=1, is_team_event=True, max_team_size=5)
        register_for_event(db_session, event_id=event.id, user_id=10, role=Role.USER, payload=team_payload(4))

        with pytest.raises(InvalidInputError, match="largest existing team of 4"):
            update_event(db_session, event_id=event.id, requester_id=1, data=EventUpdate(max_team_size=3))

        db_session.refresh(event)
        assert event.max_team_size == 5

    def test_team_size_down_to_largest_team(self, db_session: Session, make_event):
        event = make_event(created_by=1, is_team_event=True, max_team_size=5)
        team = create_team(db_session, event_id=event.id, team_name="Trio", user_id=10)
        for user_id in (11, 12):
            join_team(db_session, team_code=team.team_code, user_id=user_id)

        updated = update_event(db_session, event_id=event.id, requester_id=1, data=EventUpdate(max_team_size=3))

        assert updated.max_team_size == 3

    def test_team_size_without_teams(self, db_session: Session, make_event):
        event = make_event(created_by=1, is_team_event=True, max_team_size=5)
        updated = update_event(db_session, event_id=event.id, requester_id=1, data=EventUpdate(max_team_size=2))
        assert updated.max_team_size == 2

    def test_lower_capacity_below_count_rejected(self, db_session: Session, make_event):
        event = make_event(created_by=1, max_participants=10, participants_count=6)
        with pytest.raises(InvalidInputError, match="maxParticipants"):
            update_event(db_session, event_id=event.id, requester_id=1, data=EventUpdate(max_participants=5))

    def test_only_host_updates(self, db_session: Session, make_event):
        event = make_event(created_by=1)
        with pytest.raises(ForbiddenError):
            update_event(db_session, event_id=event.id, requester_id=2, data=EventUpdate(max_participants=5))
