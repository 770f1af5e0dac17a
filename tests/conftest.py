# tests/conftest.py
"""
Pytest configuration and shared fixtures for the payout engine tests.

Every test gets a fresh in-memory SQLite database with all tables.

Run:
    pytest tests/ -v
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config import Config
from models import Base, AppSetting, RevenueEvent, BinaryPosition, BinaryDailyEarning
from models.listeners import register_all_listeners
from affiliate_system.events.event_bus import eventBus
from affiliate_system.services.read_model import DashboardReadModel, readModel, ReadModelScope
from affiliate_system.utils.time_machine import timeMachine

# =============================================================================
# INITIALIZE CONFIG
# =============================================================================

Config.initialize_from_env()
Config.set(Config.DATABASE_URL, "sqlite://", source="tests")

# =============================================================================
# CONSTANTS
# =============================================================================

USER_IDS = {
    'primary': 33,
    'sponsor': 48,
    'newcomer': 132,
}

# Wednesday; the week starts Monday 2025-01-06
FIXED_NOW = datetime(2025, 1, 8, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def setup_listeners():
    """Register listeners once at test session start."""
    register_all_listeners()


@pytest.fixture
def session(engine):
    """Create database session for each test."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def session_provider(session):
    """Session context for read model tests; the test owns the session."""

    @contextmanager
    def _provider():
        yield session

    return _provider


# =============================================================================
# GLOBAL STATE
# =============================================================================

@pytest.fixture(autouse=True)
def clean_event_bus():
    """No handler leaks between tests."""
    eventBus.clear()
    yield
    eventBus.clear()


@pytest.fixture(autouse=True)
def fixed_time():
    """Freeze system time for daily/weekly windows."""
    timeMachine.setTime(FIXED_NOW)
    yield timeMachine
    timeMachine.resetToRealTime()


@pytest.fixture
def read_model(session_provider):
    """Private read model bound to the test session."""
    return DashboardReadModel(session_provider)


@pytest.fixture
def global_read_model(session_provider):
    """The global read model (used by event handlers), bound to the test session."""
    previous = readModel.sessionProvider
    readModel.sessionProvider = session_provider
    readModel.invalidate(ReadModelScope.ALL)
    yield readModel
    readModel.invalidate(ReadModelScope.ALL)
    readModel.sessionProvider = previous


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture
def add_settings(session):
    """Insert raw string settings."""

    def _add(values):
        for key, value in values.items():
            session.add(AppSetting(key=key, value=value))
        session.commit()

    return _add


@pytest.fixture
def add_revenue(session):
    """Insert a revenue event."""

    def _add(amount, kind="product_sale", status="approved", userID=USER_IDS['primary'], createdAt=None):
        event = RevenueEvent(
            userID=userID,
            amount=Decimal(str(amount)),
            kind=kind,
            status=status,
        )
        if createdAt is not None:
            event.createdAt = createdAt
        session.add(event)
        session.commit()
        return event

    return _add


@pytest.fixture
def primary_position(session):
    """Binary position for the primary user: left 2500, right 1800."""
    position = BinaryPosition(
        userID=USER_IDS['primary'],
        leftVolume=Decimal("2500"),
        rightVolume=Decimal("1800"),
        totalCycles=3
    )
    session.add(position)
    session.commit()
    return position


@pytest.fixture
def add_earning(session):
    """Insert a daily earning row."""

    def _add(amount, earningDate=None, cycles=1, userID=USER_IDS['primary']):
        earning = BinaryDailyEarning(
            userID=userID,
            earningDate=earningDate or FIXED_NOW.date(),
            totalEarned=Decimal(str(amount)),
            cyclesCompleted=cycles
        )
        session.add(earning)
        session.commit()
        return earning

    return _add
