import os

# keep the application's own engine off disk; tests use the engines below
os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.database.db import Base, get_db
from app.main import app
from app.models.events import Event

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed database, one connection per session, for threaded tests."""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    file_engine.dispose()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch, fake_redis):
    """Point the event locks at fakeredis."""
    monkeypatch.setattr("app.core.locks.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def as_user():
    def _headers(user_id: int, role: str = "user") -> dict[str, str]:
        return {"X-User-Id": str(user_id), "X-User-Role": role}

    return _headers


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(**fields) -> Event:
        fields.setdefault("title", "Test Event")
        fields.setdefault("created_by", 1)
        event = Event(**fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def individual_payload():
    def _payload(name: str = "Ada Lovelace", phone: str = "123-456-7890") -> dict:
        return {"type": "individual", "name": name, "email": f"{name.split()[0].lower()}@example.com", "phone": phone}

    return _payload


@pytest.fixture
def team_payload():
    def _payload(size: int, team_name: str = "Byte Club") -> dict:
        return {
            "type": "team",
            "teamName": team_name,
            "participants": [
                {"name": f"Member {i}", "email": f"member{i}@example.com", "phone": f"(555) 010-00{i:02d}"}
                for i in range(size)
            ],
        }

    return _payload
