"""Pytest configuration and fixtures for Folio tests."""

import os
import pytest
from pathlib import Path
from httpx import AsyncClient, ASGITransport

# Load test environment variables
test_env = Path(__file__).parent.parent / ".env.test"
if test_env.exists():
    from dotenv import load_dotenv
    load_dotenv(test_env)

# Set test database BEFORE importing any folio modules
TEST_DB_PATH = Path(__file__).parent / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SEED_ON_STARTUP"] = "false"

# Now import folio modules
from folio import database  # noqa: E402 - ignore import order so we can set test database
from folio.config import settings  # noqa: E402
from folio.database import dispose_engine, get_session_factory, reset_engine  # noqa: E402
from folio.seed import load_seed_content, seed_database  # noqa: E402


@pytest.fixture(scope="function")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
async def setup_test_db():
    """Set up and tear down test database for each test."""
    # Remove old test db if exists
    if TEST_DB_PATH.exists():
        await dispose_engine()
        TEST_DB_PATH.unlink()

    # Reset engine to pick up test DATABASE_URL
    reset_engine()

    # Initialize database tables
    await database.init_db()

    yield

    # Cleanup - reset engine and remove test db
    await dispose_engine()
    reset_engine()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture(scope="function")
async def seeded_db(setup_test_db):
    """Test database loaded with the bundled posts and categories."""
    categories, posts = load_seed_content(settings.seed_data_dir)
    factory = get_session_factory()
    async with factory() as db:
        await seed_database(db, categories, posts)
    yield


@pytest.fixture(scope="function")
async def db_session(setup_test_db):
    factory = get_session_factory()
    async with factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(setup_test_db):
    """Create test client against an empty database."""
    from folio.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def seeded_client(seeded_db, client):
    """Test client whose database holds the bundled content."""
    yield client
