"""Pytest configuration and fixtures for Student Management API tests."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""

from app.database import Base, get_db
from app.main import app
from app.models import Student, User, UserRole
from app.services.auth import create_access_token, hash_password


# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign key support for SQLite (required for ON DELETE CASCADE)
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Create a test client with database dependency override."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.session_version)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_user(db):
    """Create an unverified student user with profile."""
    user = User(
        email="ada@example.com",
        password_hash=hash_password("password123"),
        role=UserRole.STUDENT,
    )
    user.student = Student(name="Ada Lovelace", email="ada@example.com", course="CS")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def second_student(db):
    """Create a second student for isolation and duplicate testing."""
    user = User(
        email="grace@example.com",
        password_hash=hash_password("password123"),
        role=UserRole.STUDENT,
    )
    user.student = Student(name="Grace Hopper", email="grace@example.com", course="Math")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    """Create an admin user (no student profile)."""
    user = User(
        email="admin@example.com",
        password_hash=hash_password("adminpass"),
        role=UserRole.ADMIN,
        is_email_verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student_headers(student_user):
    return auth_header(student_user)


@pytest.fixture
def admin_headers(admin_user):
    return auth_header(admin_user)
