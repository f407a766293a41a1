"""Shared fixtures: in-memory database, users, activities and an API client."""

import os

# Must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.security import create_token_for_user
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User
from app.schemas.activity import ActivityCreate
from app.services import activity_service, enrollment_service
from app.services.policy import Actor

TEST_DATABASE_URL = "sqlite://"

# Pre-hashed password to avoid running bcrypt in every fixture
FAKE_PASSWORD_HASH = "$2b$12$hashed_password_000"


def activity_payload(**overrides) -> dict:
    payload = {
        "title": "Frações no cotidiano",
        "description": "Exercícios sobre frações equivalentes.",
        "subject": "Matemática",
        "grade_level": "6º ano",
        "objective": "Reconhecer frações equivalentes.",
        "content": [
            {
                "prompt": "Quanto é 1/2 + 1/4?",
                "kind": "multiple_choice",
                "choices": ["3/4", "2/6", "1/8"],
                "correct_answer": "3/4",
            },
            {"prompt": "Explique o que é uma fração.", "kind": "essay"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="function")
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db_session):
    def _make(name: str, email: str, role: str) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=FAKE_PASSWORD_HASH,
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def test_teacher(make_user):
    return make_user("Ana Souza", "ana@escola.com", "teacher")


@pytest.fixture
def other_teacher(make_user):
    return make_user("Bruno Lima", "bruno@escola.com", "teacher")


@pytest.fixture
def test_student(make_user):
    return make_user("Carla Dias", "carla@escola.com", "student")


@pytest.fixture
def other_student(make_user):
    return make_user("Diego Rocha", "diego@escola.com", "student")


@pytest.fixture
def teacher_actor(test_teacher):
    return Actor.from_user(test_teacher)


@pytest.fixture
def other_teacher_actor(other_teacher):
    return Actor.from_user(other_teacher)


@pytest.fixture
def student_actor(test_student):
    return Actor.from_user(test_student)


@pytest.fixture
def other_student_actor(other_student):
    return Actor.from_user(other_student)


@pytest.fixture
def make_activity(db_session):
    def _make(actor: Actor, **overrides):
        return activity_service.create_activity(
            db_session, actor=actor, obj_in=ActivityCreate(**activity_payload(**overrides))
        )

    return _make


@pytest.fixture
def test_activity(make_activity, teacher_actor):
    """A draft, private activity owned by test_teacher."""
    return make_activity(teacher_actor)


@pytest.fixture
def published_activity(db_session, make_activity, teacher_actor, test_student):
    """Published activity with test_student enrolled."""
    activity = make_activity(teacher_actor)
    activity = activity_service.publish_activity(
        db_session, actor=teacher_actor, activity_id=activity.id
    )
    enrollment_service.enroll_students(
        db_session,
        actor=teacher_actor,
        activity_id=activity.id,
        emails=[test_student.email],
    )
    db_session.refresh(activity)
    return activity


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    # no context manager: startup would run create_all on the configured engine
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_token_for_user(user)}"}

    return _headers
