# tests/conftest.py
"""Shared fixtures: in-memory SQLite session, fixed clock, deterministic signer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before fuelguard.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("QR_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("QR_SECRET", "test-secret")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fuelguard.database import create_tables
from fuelguard.services.signature_service import SignatureService

NOW = datetime(2025, 3, 10, 14, 0, 0)


class FixedClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def signer():
    return SignatureService("test-secret")
