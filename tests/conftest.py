"""Pytest fixtures and configuration for dayfocus tests."""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from dayfocus.database.database import Base
from dayfocus.database.repository import UserStateRepository
from dayfocus.models.task import Task, Category, Importance, Urgency


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Monday; 2025-01-11/12 is the following weekend
REFERENCE_DAY = datetime(2025, 1, 6)


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from dayfocus.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def state_repository(db_session: Session):
    """Create a UserStateRepository instance for testing."""
    return UserStateRepository(db_session)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def today():
    return REFERENCE_DAY


@pytest.fixture
def work_category():
    return Category(id="cat-work", name="Work", color="#2563eb", icon="briefcase", daily_limit=2)


@pytest.fixture
def home_category():
    return Category(id="cat-home", name="Home", color="#16a34a", icon="home", daily_limit=3)


@pytest.fixture
def personal_category():
    """Category without a configured hour cap."""
    return Category(id="cat-personal", name="Personal", color="#9333ea", icon="user", daily_limit=5)


@pytest.fixture
def sample_task_base(home_category):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "recurring_series_id": None,
        "name": "Test Task",
        "category": home_category,
        "importance": Importance.NOT_IMPORTANT,
        "urgency": Urgency.NOT_URGENT,
        "due_date": REFERENCE_DAY,
        "estimated_hours": 1.0,
        "completed": False,
        "completed_at": None,
        "created_at": REFERENCE_DAY,
        "updated_at": REFERENCE_DAY,
        "start_date": None,
        "is_recurring": False,
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for tasks with a fresh id; keyword arguments override the base."""
    def _make(**overrides) -> Task:
        return Task(**{**sample_task_base, "id": str(uuid.uuid4()), **overrides})
    return _make


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def daily_task(make_task):
    """Recurring daily template (occurrence #1 of its own series)."""
    task_id = str(uuid.uuid4())
    return make_task(
        id=task_id,
        recurring_series_id=task_id,
        name="Stretch",
        is_recurring=True,
        recurring_interval="daily",
        recurring_end_type="never",
        recurring_current_count=1,
    )


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from dayfocus.api.app import app
    from dayfocus.database.database import get_db

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)
    yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(test_user_id):
    return {"X-User-Id": test_user_id}
