"""
Test configuration and fixtures.

Every test gets its own in-memory SQLite database; the app's `get_db` is
overridden to hand out the same session the fixtures write through.
"""
import os
from datetime import date

# Must be set before the app (and its settings) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from attendance_app.main import app
from attendance_app.database import Base, get_db
from attendance_app.models import (
    User, UserType, Student, Faculty, Hod, Batch, Subject, FacultyBatchSubject,
)
from attendance_app.core.security import get_password_hash, create_user_token

fake = Faker()

PASSWORD = "password123"
# Hashed once and shared by every fixture user
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Create a fresh database session for each test"""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """Create test client with database override"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _new_user(user_type: UserType, name=None, email=None) -> User:
    return User(
        name=name or fake.name(),
        email=(email or f"{fake.unique.user_name()}@college.edu").lower(),
        password_hash=PASSWORD_HASH,
        type=user_type,
    )


def _save(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def auth_headers():
    """Bearer headers for any user, signed the same way login does"""
    def _headers(user: User) -> dict:
        token = create_user_token(user.id, user.email, user.type.value)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def create_hod(db):
    def _create(department="Computer Science", **kwargs) -> User:
        user = _new_user(UserType.HOD, **kwargs)
        user.hod = Hod(department=department)
        return _save(db, user)
    return _create


@pytest.fixture
def create_faculty(db):
    def _create(department="Computer Science", **kwargs) -> User:
        user = _new_user(UserType.FACULTY, **kwargs)
        user.faculty = Faculty(department=department)
        return _save(db, user)
    return _create


@pytest.fixture
def create_student(db):
    def _create(batch=None, is_verified=True, course="BCA", roll_number=None, **kwargs) -> User:
        user = _new_user(UserType.STUDENT, **kwargs)
        user.student = Student(
            roll_number=roll_number or fake.unique.bothify("BCA####"),
            course=course,
            batch_id=batch.id if batch is not None else None,
            is_verified=is_verified,
        )
        return _save(db, user)
    return _create


@pytest.fixture
def create_batch(db):
    def _create(batch_name="2024-2027", course="BCA", current_semester=1) -> Batch:
        return _save(db, Batch(batch_name=batch_name, course=course, current_semester=current_semester))
    return _create


@pytest.fixture
def create_subject(db):
    def _create(code=None, name=None, department="Computer Science", semester=1) -> Subject:
        return _save(db, Subject(
            name=name or fake.catch_phrase()[:150],
            code=code or fake.unique.bothify("CS###"),
            department=department,
            semester=semester,
        ))
    return _create


@pytest.fixture
def assign_teaching(db):
    def _assign(faculty: User, batch: Batch, subject: Subject) -> FacultyBatchSubject:
        return _save(db, FacultyBatchSubject(faculty_id=faculty.id, batch_id=batch.id, subject_id=subject.id))
    return _assign


@pytest.fixture
def hod(create_hod):
    return create_hod()


@pytest.fixture
def faculty(create_faculty):
    return create_faculty()


@pytest.fixture
def batch(create_batch):
    return create_batch()


@pytest.fixture
def subject(create_subject):
    return create_subject()


@pytest.fixture
def student(create_student, batch):
    return create_student(batch=batch)


@pytest.fixture
def teaching(assign_teaching, faculty, batch, subject):
    """`faculty` teaches `subject` to `batch`"""
    return assign_teaching(faculty, batch, subject)


@pytest.fixture
def today():
    return date.today()
