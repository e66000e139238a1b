"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For the store, clock and transport doubles, see tests/mocks/notifier_mocks.py
"""

import os
import pytest

from tests.mocks.notifier_mocks import make_store, FakeClock, RecordingTransport


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests that exercise the SQLAlchemy store"
    )


@pytest.fixture
def store():
    """Fresh in-memory store per test (single-threaded use only)."""
    store = make_store()
    yield store
    store.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Keep real credentials in the developer's environment out of tests."""
    for key in ('DATABASE_URL', 'SMTP_USERNAME', 'SMTP_PASSWORD', 'GOOGLE_APP_PASSWORD',
                'MAIL_TRANSPORT', 'MAIL_FROM', 'DISCORD_TOKEN', 'LOG_LEVEL',
                'DISCORD_LOG_SERVERID', 'DISCORD_LOG_CHANNELID', 'SMTP_SERVER', 'SMTP_PORT'):
        if key in os.environ:
            monkeypatch.delenv(key)
