"""Shared fixtures: in-memory app, users and bearer tokens."""
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from talkitout.config import Settings
from talkitout.constants import UserRole
from talkitout.db import Base, make_engine, make_sessionmaker
from talkitout.main import create_app
from talkitout.models import User

JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"


def make_token(user_id, secret=JWT_SECRET, token_type="access", expires_in=timedelta(hours=1)):
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_header(user, **kwargs):
    return {"Authorization": f"Bearer {make_token(user.id, **kwargs)}"}


@pytest.fixture
def settings():
    """No LLM credential: classifier and responder run their offline paths."""
    return Settings(
        openai_api_key="",
        jwt_secret=JWT_SECRET,
        database_url="sqlite://",
        rate_limit_enabled=False,
        environment="test",
        log_level="WARNING",
    )


@pytest.fixture
def llm_settings(settings):
    return replace(settings, openai_api_key="sk-test")


@pytest.fixture
def db():
    """Standalone session for unit tests that never touch HTTP."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = make_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def app_db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def _add_user(session, role, name, email):
    user = User(role=role, name=name, email=email)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def student(app_db):
    return _add_user(app_db, UserRole.STUDENT, "Alex Tan", "alex@school.sg")


@pytest.fixture
def other_student(app_db):
    return _add_user(app_db, UserRole.STUDENT, "Bea Lim", "bea@school.sg")


@pytest.fixture
def counselor(app_db):
    return _add_user(app_db, UserRole.COUNSELOR, "Ms Wong", "wong@school.sg")


@pytest.fixture
def make_user():
    return _add_user
