"""Pytest fixtures and configuration for TaskMind tests."""

import pytest
import uuid
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from taskmind.database.database import Base
from taskmind.database.repository import TaskRepository
from taskmind.database.event_repository import EventRepository
from taskmind.database.user_repository import UserRepository
from taskmind.models.task import Task, TaskStatus, TaskPriority
from taskmind.temporal.normalizer import APP_TIMEZONE


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates a test user in the database.
    """
    from sqlalchemy import event
    from sqlalchemy.engine import Engine
    from taskmind.database.models import UserDB

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(Engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    now = datetime.utcnow()
    session.add(UserDB(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    ))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        event.remove(Engine, "connect", set_sqlite_pragmas)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def event_repository(db_session: Session):
    """Create an EventRepository instance for testing."""
    return EventRepository(db_session)


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def tz():
    return APP_TIMEZONE


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    now = datetime.utcnow()
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "description": "Test description",
        "subject": "Cálculo I",
        "due_at": None,
        "priority": TaskPriority.MEDIUM,
        "status": TaskStatus.PENDING,
        "color": None,
        "grade": None,
        "completed_at": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from taskmind.models.user import User
    now = datetime.utcnow()
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from taskmind.api.app import app
    from taskmind.database.database import get_db
    from taskmind.auth.dependencies import get_current_user

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def unauthenticated_client(db_session: Session):
    """Test client that keeps real JWT authentication (database still overridden)."""
    from taskmind.api.app import app
    from taskmind.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
