import os
import tempfile
from datetime import timedelta

os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "gradebook-test-logs"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gradebook.main import app
from gradebook.core.security.auth import create_hashed_password, generate_token
from gradebook.db.base import Base
from gradebook.db.init_db import init_db
from gradebook.db.session import get_db
from gradebook.models.assignment import Assignment
from gradebook.models.course import Course
from gradebook.models.user import Role, RoleType, User
from gradebook.utils.helpers import format_datetime, get_utc_now

API = "/api/v1"
PASSWORD = "secret-pass"

_password_hash = None

def password_hash():
    global _password_hash
    if _password_hash is None:
        _password_hash = create_hashed_password(PASSWORD)
    return _password_hash


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as db:
        init_db(db)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db):
    def _make_user(name, role=RoleType.STUDENT, email=None, **fields):
        username = name.lower().replace(" ", ".")
        role_row = db.query(Role).filter(Role.role == role).first()
        values = {
            "name": name,
            "email": email or f"{username}@example.edu",
            "username": username,
            "hashed_password": password_hash(),
            "role_id": role_row.id,
            "status": "active",
            "storage_used": 0,
            "ai_credits": 10,
        }
        values.update(fields)
        user = User(**values)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user

def auth_headers(user):
    return {"Authorization": f"Bearer {generate_token({'sub': user.username})}"}

@pytest.fixture
def instructor(make_user):
    return make_user("Ada Instructor", role=RoleType.TEACHER)

@pytest.fixture
def student1(make_user):
    return make_user("Sam One")

@pytest.fixture
def student2(make_user):
    return make_user("Kim Two")

@pytest.fixture
def course(db, instructor, student1, student2):
    course = Course(title="Sustainable Design", description="Studio", instructor_id=instructor.id)
    course.students.extend([student1, student2])
    db.add(course)
    db.commit()
    db.refresh(course)
    return course

@pytest.fixture
def assignment(db, course):
    assignment = Assignment(
        course_id=course.id,
        title="Essay",
        description="Write an essay",
        due_date=format_datetime(get_utc_now() + timedelta(days=7)),
        max_grade=100,
        rubric=[{"criteria": "Content", "description": "Depth", "points": 100}],
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment

@pytest.fixture
def auth():
    return auth_headers
