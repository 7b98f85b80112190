"""Wiring of settings, stores and use cases into a WalletService."""

from __future__ import annotations

from typing import TYPE_CHECKING

from wallet_core.application.service import (
    DefaultWalletService,
    InstrumentingWalletService,
    LoggingWalletService,
)
from wallet_core.application.use_cases import (
    ApplyPaymentUseCase,
    GetAccountUseCase,
    GetPaymentsUseCase,
)
from wallet_core.config import Settings, get_settings
from wallet_core.infrastructure.database import (
    build_engine,
    build_session_factory,
    create_schema,
    uses_single_connection,
)
from wallet_core.infrastructure.instrumented_store import InstrumentingTransactionalStore
from wallet_core.infrastructure.sql_store import SqlAlchemyTransactionalStore
from wallet_core.infrastructure.time_provider import SystemTimeProvider
from wallet_core.logging_config import configure_logging
from wallet_core.metrics import WalletMetrics, default_metrics

if TYPE_CHECKING:
    from wallet_core.application.ports import TimeProvider, TransactionalStore
    from wallet_core.application.service import WalletService


def create_store(settings: Settings) -> SqlAlchemyTransactionalStore:
    """Build the SQLAlchemy store and make sure its tables exist."""
    engine = build_engine(settings.database)
    create_schema(engine)
    return SqlAlchemyTransactionalStore(
        build_session_factory(engine), exclusive=uses_single_connection(engine)
    )


def build_wallet_service(
    settings: Settings | None = None,
    store: TransactionalStore | None = None,
    time_provider: TimeProvider | None = None,
    metrics: WalletMetrics | None = None,
) -> WalletService:
    """Assemble the service delivery adapters talk to.

    Any collaborator left as None is built from settings. With metrics
    enabled (or metrics given) both the store and the service are
    instrumented; the service decorators stack as
    instrumenting -> logging -> core.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.logging.level)
    if metrics is None and settings.metrics.enabled:
        metrics = default_metrics(settings.metrics.prefix)

    store = store or create_store(settings)
    if metrics is not None:
        store = InstrumentingTransactionalStore(store, metrics.storage_queries)
    time_provider = time_provider or SystemTimeProvider()

    core = DefaultWalletService(
        apply_payment=ApplyPaymentUseCase(
            store=store,
            time_provider=time_provider,
            opening_balance=settings.ledger.opening_balance,
        ),
        get_account=GetAccountUseCase(store),
        get_payments=GetPaymentsUseCase(store),
    )
    service: WalletService = LoggingWalletService(core)
    if metrics is not None:
        service = InstrumentingWalletService(service, metrics.service_queries)
    return service
