"""
Shared fixtures for the WastePay test suite.

Every test gets its own SQLite file database under ``tmp_path``; service
tests share one AsyncSession, API tests go through FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from wastepay.core.config import Settings
from wastepay.db.engine import build_engine, build_session_maker, create_db_and_tables
from wastepay.main import create_app
from wastepay.services.location_service import LocationService
from wastepay.services.plot_service import PlotService
from wastepay.services.schedule_service import ScheduleService


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'wastepay-test.sqlite'}"


@pytest.fixture
async def engine(database_url):
    engine = build_engine(database_url)
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with build_session_maker(engine)() as session:
        yield session


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def location_service(session):
    return LocationService(session)


@pytest.fixture
def plot_service(session):
    return PlotService(session)


@pytest.fixture
def schedule_service(session):
    return ScheduleService(session)


@pytest.fixture
async def location(location_service):
    return await location_service.create_location("Kilimani")


@pytest.fixture
def plot_data(location):
    """Fields for plot #7 in Kilimani, billed 500 a month."""
    return {
        "plot_number": "7",
        "location_id": location.id,
        "owner_name": "Jane Wanjiku",
        "mobile_number": "0712345678",
        "bags_per_collection": 2,
        "expected_amount": 500.0,
    }


@pytest.fixture
async def plot(plot_service, plot_data):
    return await plot_service.create_plot(plot_data)


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app(database_url):
    return create_app(Settings(database_url=database_url, log_level="WARNING"))


@pytest.fixture
def client(app):
    """TestClient running the app lifespan (tables are created on startup)."""
    with TestClient(app) as c:
        yield c
