"""
Shared fixtures: an in-memory database per test, the FastAPI app wired to it,
and seeded random sources for the mock evaluators.
"""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVALUATOR"] = "mock"
os.environ["EVALUATION_DELAY_SECONDS"] = "0"

import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from exameval.database import get_db, init_db
from exameval.dependencies import essay_evaluator, file_evaluator
from exameval.evaluators.mock import MockEssayEvaluator, MockFileEvaluator
from exameval.main import app

API = "/api/v1"


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
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[essay_evaluator] = lambda: MockEssayEvaluator(random.Random(7))
    app.dependency_overrides[file_evaluator] = lambda: MockFileEvaluator(random.Random(7))
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    """Register a user and return (user, token)."""
    def _register(name, email, role="student", password="secret123", **profile):
        response = client.post(f"{API}/auth/register", json={
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            **profile,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["data"], body["token"]
    return _register


@pytest.fixture
def teacher(register_user):
    return register_user("Ms Teacher", "teacher@school.edu", role="teacher")


@pytest.fixture
def student(register_user):
    return register_user("Sam Student", "sam@school.edu", section="10A")
