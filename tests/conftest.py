import os

# Must be set before the application modules build their engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.users import User
from utils.events import EventPublisher
from utils.hashing import get_password_hash
from utils.tokenJWT import token_for

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"
# bcrypt is slow on purpose; hash the shared test password once
PASSWORD_HASH = get_password_hash(PASSWORD)


class RecordingPublisher(EventPublisher):
    def __init__(self):
        self.events = []

    async def publish(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]

    def payloads(self, event):
        return [payload for name, payload in self.events if name == event]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def client(db, publisher):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    previous = app.state.publisher
    app.state.publisher = publisher
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        app.state.publisher = previous


@pytest.fixture
def make_user(db):
    def _make(username, role="Public", approved=True, blocked=False, block_reason=""):
        user = User(
            username=username,
            password_hash=PASSWORD_HASH,
            role=role,
            is_approved=approved,
            is_blocked=blocked,
            block_reason=block_reason,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def headers_for():
    def _headers(user):
        return {"Authorization": f"Bearer {token_for(user)}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="Admin")


@pytest.fixture
def citizen(make_user):
    return make_user("citizen", role="Public")


@pytest.fixture
def volunteer(make_user):
    return make_user("volunteer", role="Volunteer")


@pytest.fixture
def ngo(make_user):
    return make_user("ngo", role="NGO")
