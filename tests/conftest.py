"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from database.database import create_engine_for, make_session_factory
from database.models import Base
from tests import get_test_db_url


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
async def db_engine():
    """
    Fresh schema per test.

    In-memory SQLite shares a single connection, so every session created
    from the factory sees the same data.
    """
    engine = create_engine_for(get_test_db_url())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Async session factory bound to the per-test engine."""
    return make_session_factory(db_engine)
