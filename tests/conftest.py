"""Shared pytest fixtures for the test suite."""

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from wallet_core.infrastructure.in_memory_store import InMemoryTransactionalStore
from wallet_core.infrastructure.time_provider import FixedTimeProvider
from wallet_core.logging_config import reset_logging


@pytest.fixture
def fixed_time() -> datetime:
    """A fixed timestamp for deterministic testing."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def time_provider(fixed_time: datetime) -> FixedTimeProvider:
    """A time provider with a fixed timestamp."""
    return FixedTimeProvider(fixed_time)


@pytest.fixture
def store() -> InMemoryTransactionalStore:
    """An empty in-memory store."""
    return InMemoryTransactionalStore()


@pytest.fixture(autouse=True)
def _isolated_logging() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps seeing wallet_core records."""
    yield
    reset_logging()
