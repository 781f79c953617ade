"""
Pytest configuration and shared fixtures for backend tests.

This module provides test fixtures for database sessions, test clients,
and commonly used test data.

NOTE: Heavy imports (main, models) are done lazily inside fixtures
to avoid loading the entire app for tests that don't need it.
"""

import gc
import sys
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

# Add backend directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Type hints only - not imported at runtime
if TYPE_CHECKING:
    from typing import AsyncGenerator

    from httpx import AsyncClient
    from infrastructure.database import models
    from sqlalchemy.ext.asyncio import AsyncSession


# Files that use database fixtures (memory intensive)
DB_FIXTURE_FILES = {
    "test_crud.py",
    "test_database.py",
    "test_message_ingestion.py",
    "test_message_selector.py",
    "test_summarize_orchestrator.py",
}


def pytest_collection_modifyitems(items):
    """Auto-apply markers based on test directory and fixtures used."""
    for item in items:
        filepath = str(item.fspath)
        filename = Path(filepath).name

        # Apply 'unit' marker to tests in unit directory
        if "/tests/unit/" in filepath:
            item.add_marker(pytest.mark.unit)
            # Mark database-using tests
            if filename in DB_FIXTURE_FILES:
                item.add_marker(pytest.mark.db)
        # Apply 'integration' marker to tests in integration directory
        elif "/tests/integration/" in filepath:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.db)  # All integration tests use db


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Run garbage collection after each test to free memory."""
    yield
    gc.collect()


# ============================================================================
# Database fixtures (only loaded when needed)
# ============================================================================


@pytest.fixture(scope="function")
async def test_db() -> "AsyncGenerator[AsyncSession, None]":
    """
    Create a fresh test database for each test function.

    Uses an in-memory SQLite database that is created and destroyed
    for each test to ensure isolation.
    """
    from infrastructure.database.connection import Base
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, connect_args={"check_same_thread": False}
    )

    # Create tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestingSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await test_engine.dispose()


@pytest.fixture
def get_test_db(test_db: "AsyncSession"):
    """A get_db-style generator function that always yields the test session."""

    async def override_get_db():
        yield test_db

    return override_get_db


# ============================================================================
# App/Client fixtures (only loaded when needed)
# ============================================================================


def _get_app():
    """Lazy import of the FastAPI app."""
    from main import app

    return app


@pytest.fixture(scope="function")
async def client(
    get_test_db,
    mock_messaging_client,
    mock_code_table,
    mock_summarize_orchestrator,
) -> "AsyncGenerator[AsyncClient, None]":
    """
    Create a test client wired to the test database.

    The webhook handler is real; the messaging platform, the code table and
    the summarize orchestrator are mocks, reachable through app.state.
    """
    from core import Settings, get_settings
    from httpx import ASGITransport, AsyncClient
    from infrastructure.cache import CacheManager
    from infrastructure.database.connection import get_db
    from orchestration import WebhookEventHandler
    from services import MessageIngestionService, ProfileService

    app = _get_app()

    # Lifespan doesn't run under ASGITransport, so set up app state here
    profile_service = ProfileService(mock_messaging_client, cache=CacheManager())
    app.state.code_table = mock_code_table
    app.state.summarize_orchestrator = mock_summarize_orchestrator
    app.state.event_handler = WebhookEventHandler(
        get_db_session=get_test_db,
        summarize_orchestrator=mock_summarize_orchestrator,
        ingestion_service=MessageIngestionService(profile_service),
        code_table=mock_code_table,
        messaging_client=mock_messaging_client,
    )
    app.state.background_scheduler = MagicMock()

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_settings] = lambda: Settings(channel_secret=TEST_CHANNEL_SECRET, _env_file=None)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Sample data fixtures
# ============================================================================


@pytest.fixture
async def sample_group(test_db: "AsyncSession") -> "models.Conversation":
    """Create a group conversation named "Team"."""
    import crud
    from domain.value_objects.enums import ConversationKind

    return await crud.upsert_conversation(test_db, "G-team", ConversationKind.GROUP, "Team")


@pytest.fixture
async def sample_direct(test_db: "AsyncSession") -> "models.Conversation":
    """Create a direct conversation with "Bob"."""
    import crud
    from domain.value_objects.enums import ConversationKind

    return await crud.upsert_conversation(test_db, "U-bob", ConversationKind.DIRECT, "Bob")


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    from core import reset_settings

    monkeypatch.setenv("CHANNEL_SECRET", TEST_CHANNEL_SECRET)
    monkeypatch.setenv("CHANNEL_ACCESS_TOKEN", "test-access-token")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-anthropic-key")

    # Reset settings cache so new env vars are picked up
    reset_settings()
    yield {"channel_secret": TEST_CHANNEL_SECRET}
    reset_settings()


# ============================================================================
# Digest pipeline fixtures (imported from fixtures module)
# ============================================================================

from tests.fixtures.digest_fixtures import (  # noqa: E402, F401
    TEST_CHANNEL_SECRET,
    fake_clock,
    mock_code_table,
    mock_generation_service,
    mock_messaging_client,
    mock_summarize_orchestrator,
)
