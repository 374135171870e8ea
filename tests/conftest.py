"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from edurank.core.database import Base, get_db
from edurank.core.security import STUDENT, create_access_token, hash_password
from edurank.main import app
from edurank.models.school import SchoolConfig
from edurank.models.student import Student
from edurank.models.user import Role, TeachingAssignment, User

API = "/api/v1"


@pytest.fixture(scope="function")
def session_factory() -> Generator[sessionmaker, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    """Session for arranging and inspecting test data."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Test client whose requests use the test database."""

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_staff(db) -> Callable[..., User]:
    """Factory for staff users. ``assignments`` maps class level to subject keys."""

    def _make(
        username: str,
        role: Role = Role.SUBJECT_TEACHER,
        password: str = "secret123",
        assigned_class: str | None = None,
        assignments: dict[str, list[str]] | None = None,
    ) -> User:
        user = User(
            name=username.title(),
            username=username,
            password_hash=hash_password(password),
            role=role,
            assigned_class=assigned_class,
            is_active=True,
        )
        user.teaching_assignments = [
            TeachingAssignment(class_level=level, subjects=subjects)
            for level, subjects in (assignments or {}).items()
        ]
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def admin_user(db, make_staff) -> User:
    """School with an administrator account."""
    db.add(SchoolConfig(school_name="Govt. High School", admin_name="Admin", is_setup=True))
    db.commit()
    return make_staff("admin", role=Role.ADMIN, password="admin123")


@pytest.fixture
def make_student(db) -> Callable[..., Student]:
    """Factory for students."""

    def _make(
        roll_no: str,
        name: str,
        class_level: str = "6",
        marks: dict[str, int] | None = None,
        manual_total: int | None = None,
        password: str | None = None,
    ) -> Student:
        student = Student(
            roll_no=roll_no,
            name=name,
            class_level=class_level,
            marks=marks or {},
            manual_total=manual_total,
            password_hash=hash_password(password) if password else None,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    return _make


def auth_headers(user: User) -> dict[str, str]:
    """Bearer headers for a staff user."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}


def student_headers(student: Student) -> dict[str, str]:
    """Bearer headers for a student."""
    token = create_access_token(student.id, f"{student.class_level}-{student.roll_no}", kind=STUDENT)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers(admin_user)
