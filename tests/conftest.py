import itertools
import os
import uuid

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from main import app
from core.config import get_settings
from dependencies import create_access_token, get_session
from auth.security import get_password_hash
from models import Post, Topic, User

@pytest.fixture(scope="session")
def settings():
    return get_settings()

@pytest.fixture(scope="session")
def test_db_engine(settings):
    # One shared in-memory connection, visible to the test and to the app
    engine = create_engine(
        settings.TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()

@pytest.fixture
def db_session(test_db_engine):
    SQLModel.metadata.create_all(test_db_engine)
    with Session(test_db_engine) as session:
        yield session
    SQLModel.metadata.drop_all(test_db_engine)

@pytest.fixture
def client(test_db_engine, db_session):
    def get_session_override():
        with Session(test_db_engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def auth_header():
    """Cookie header that authenticates requests as the given user"""
    def _auth_header(user: User) -> dict:
        token = create_access_token({"sub": user.username})
        return {"Cookie": f"access_token={token}"}
    return _auth_header

@pytest.fixture
def sequence():
    return itertools.count(1)

@pytest.fixture
def make_user(db_session, sequence):
    def _make_user(**overrides) -> User:
        n = next(sequence)
        data = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
            "full_name": f"User {n}",
            "password": get_password_hash("password"),
        }
        data.update(overrides)
        user = User(**data)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user

@pytest.fixture
def make_topic(db_session, make_user, sequence):
    def _make_topic(user: User | None = None, **overrides) -> Topic:
        user = user or make_user()
        n = next(sequence)
        data = {
            "id": uuid.uuid4(),
            "name": f"Topic {n}",
            "slug": f"topic-{n}",
            "user_id": user.id,
        }
        data.update(overrides)
        topic = Topic(**data)
        db_session.add(topic)
        db_session.commit()
        db_session.refresh(topic)
        return topic
    return _make_topic

@pytest.fixture
def make_post(db_session, make_user, sequence):
    def _make_post(user: User | None = None, **overrides) -> Post:
        user = user or make_user()
        n = next(sequence)
        data = {
            "id": uuid.uuid4(),
            "title": f"Post {n}",
            "slug": f"post-{n}",
            "body": "Some content",
            "user_id": user.id,
        }
        data.update(overrides)
        post = Post(**data)
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post
    return _make_post
