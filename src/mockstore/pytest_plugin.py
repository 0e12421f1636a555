"""Pytest fixtures for the MockDatabase lifecycle.

Enable the plugin and register models in a conftest.py:

    pytest_plugins = ["mockstore.pytest_plugin"]

    @pytest.fixture(scope="session")
    def mockstore_setup():
        def setup(database):
            database.register(Food, "food", FOOD_RECORDS)
        return setup

Tests then request ``mockstore``, which is reset before each test.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from mockstore.config import DatabaseSettings
from mockstore.database import MockDatabase


@pytest.fixture(scope="session")
def mockstore_settings() -> DatabaseSettings:
    """Settings for the session database. Override to customise."""
    return DatabaseSettings()


@pytest.fixture(scope="session")
def mockstore_setup() -> Callable[[MockDatabase], None]:
    """Model registration hook. Override to register models."""
    return lambda database: None


@pytest.fixture(scope="session")
def mockstore_session(
    mockstore_settings: DatabaseSettings,
    mockstore_setup: Callable[[MockDatabase], None],
) -> Iterator[MockDatabase]:
    """One MockDatabase for the whole session, disposed at the end."""
    with MockDatabase(mockstore_settings) as database:
        mockstore_setup(database)
        yield database


@pytest.fixture
def mockstore(mockstore_session: MockDatabase) -> MockDatabase:
    """The session database, reset to its registered state."""
    mockstore_session.reset()
    return mockstore_session
