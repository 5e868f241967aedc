import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# app.config refuses to load without it
os.environ["SECRET_KEY"] = "test-secret-key"

from app.auth import get_current_user
from app.database import get_db, init_db
from app.main import app
from app.models import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def users(db):
    """Two accounts, u1 and u2."""
    for user_id in ("u1", "u2"):
        db.add(User(id=user_id, name=user_id.upper(), email=f"{user_id}@example.com", password="x"))
    db.commit()
    return "u1", "u2"


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Make requests as the given user id (None means logged out)."""
    def _act_as(user_id):
        app.dependency_overrides[get_current_user] = lambda: user_id

    yield _act_as
    app.dependency_overrides.pop(get_current_user, None)


def coffee(**overrides):
    data = {
        "description": "Coffee",
        "amount": "4.50",
        "category": "Food",
        "date": "2024-01-01",
    }
    data.update(overrides)
    return data
