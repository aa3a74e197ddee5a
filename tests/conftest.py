"""
Pytest configuration and fixtures for CommandStack tests.

Provides database session fixtures, sample data and an API test client.
"""

import os

# Settings are read once and cached; configure them before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PYTHON_ENV", "development")
os.environ.setdefault("TIMEZONE", "Asia/Seoul")
os.environ.setdefault("GOOGLE_OAUTH_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_OAUTH_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")

from datetime import timedelta
from typing import Generator

import pytest
import sqlalchemy as sa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from commandstack.api.main import app
from commandstack.auth import get_token_store, principal_for
from commandstack.database import get_db
from commandstack.models import Base, Context, Task, User, WorkType
from commandstack.time_utils import utcnow


# Configure SQLite to enforce foreign key constraints in tests
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a clean database session for each test.

    Uses an in-memory SQLite database that is torn down after each test.
    The single connection is shared so the API thread pool sees the same
    data as the test.

    Yields:
        Session: SQLAlchemy session for database operations
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as connection:
            connection.execute(sa.text("PRAGMA foreign_keys=OFF"))
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def sample_context(db_session: Session) -> Context:
    """
    Create a sample Context for testing.

    Returns:
        Context: A persisted context
    """
    context = Context(
        namespace="work",
        description="Day job",
        color="#FF5733",
    )
    db_session.add(context)
    db_session.commit()
    db_session.refresh(context)
    return context


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """
    Create a signed-up user whose access token is valid for another hour.

    Returns:
        User: A persisted user with Google tokens
    """
    user = User(
        google_id="google-sub-123",
        email="jane@example.com",
        name="Jane Doe",
        picture_url="https://example.com/jane.png",
        access_token="access-token",
        refresh_token="refresh-token",
        token_expires_at=utcnow() + timedelta(hours=1),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def sample_task(db_session: Session, sample_context: Context) -> Task:
    """
    Create an unsynced task with a deadline.

    Returns:
        Task: A persisted PENDING task
    """
    task = Task(
        syntax="Write report",
        details="Quarterly numbers",
        type=WorkType.TASK,
        context_id=sample_context.id,
        deadline=utcnow() + timedelta(days=1),
    )
    db_session.add(task)
    db_session.commit()
    db_session.refresh(task)
    return task


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create an API test client bound to the test database session.

    Yields:
        TestClient: Client with the ``get_db`` dependency overridden
    """

    def override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in_client(client: TestClient, sample_user: User) -> TestClient:
    """
    API client holding a session for ``sample_user``.

    Signs in the same way a client does after the OAuth redirect: by
    exchanging a one-time token.
    """
    token = get_token_store().issue(principal_for(sample_user))
    response = client.post("/api/auth/exchange", json={"token": token})
    assert response.status_code == 200
    return client
