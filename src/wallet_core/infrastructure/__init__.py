"""Infrastructure layer - Concrete implementations of ports.

This layer contains:
- Stores: In-memory and SQLAlchemy implementations of TransactionalStore,
  plus a wrapper recording Prometheus timings for any store
- Database: Engine/session construction and ORM table models
- Time Provider: Clock abstraction for testability

Infrastructure adapters implement the ports defined in the application layer.
"""

from wallet_core.infrastructure.in_memory_store import InMemoryTransactionalStore
from wallet_core.infrastructure.instrumented_store import InstrumentingTransactionalStore
from wallet_core.infrastructure.sql_store import SqlAlchemyTransactionalStore
from wallet_core.infrastructure.time_provider import FixedTimeProvider, SystemTimeProvider

__all__ = [
    "FixedTimeProvider",
    "InMemoryTransactionalStore",
    "InstrumentingTransactionalStore",
    "SqlAlchemyTransactionalStore",
    "SystemTimeProvider",
]
