"""pytest configuration for Waypoint tests."""

from __future__ import annotations

import itertools
import sqlite3
from unittest.mock import MagicMock

import pytest

from waypoint.db import close_db, init_db, set_db_path
from waypoint.discovery import (
    DiscoveryCoordinator,
    HealthProber,
    RegistryStore,
    RpcRelay,
)

START_MS = 1_700_000_000_000


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    set_db_path(path)
    init_db(path)
    yield path
    close_db()


@pytest.fixture
def db_conn(db_path):
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    yield conn
    conn.close()


@pytest.fixture
def clock():
    """Deterministic epoch-ms clock advancing one second per reading."""
    ticks = itertools.count(START_MS, 1000)
    return lambda: next(ticks)


@pytest.fixture
async def registry(db_conn, clock):
    coordinator = DiscoveryCoordinator(
        RegistryStore(db_conn),
        prober=HealthProber(clock=clock),
        relay=RpcRelay(),
        clock=clock,
    )
    yield coordinator
    await coordinator.aclose()


@pytest.fixture
def make_response():
    """Factory for stand-ins of ``httpx.Response``."""

    def _make(status_code: int = 200, body=None) -> MagicMock:
        resp = MagicMock()
        resp.status_code = status_code
        resp.json = MagicMock(return_value=body)
        return resp

    return _make
