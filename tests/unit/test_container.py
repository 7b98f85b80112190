"""Tests for wiring a WalletService from settings."""

from datetime import datetime

from prometheus_client import CollectorRegistry

from wallet_core.application.service import InstrumentingWalletService, LoggingWalletService
from wallet_core.config import DatabaseSettings, LedgerSettings, MetricsSettings, Settings
from wallet_core.container import build_wallet_service, create_store
from wallet_core.domain.entities import PaymentRequest
from wallet_core.infrastructure.in_memory_store import InMemoryTransactionalStore
from wallet_core.infrastructure.sql_store import SqlAlchemyTransactionalStore
from wallet_core.infrastructure.time_provider import FixedTimeProvider
from wallet_core.metrics import WalletMetrics


def make_settings(**overrides: object) -> Settings:
    return Settings(database=DatabaseSettings(url="sqlite://"), **overrides)


class TestBuildWalletService:
    def test_returns_logging_decorator_without_metrics(
        self, store: InMemoryTransactionalStore
    ) -> None:
        settings = make_settings(metrics=MetricsSettings(enabled=False))

        service = build_wallet_service(settings=settings, store=store)

        assert isinstance(service, LoggingWalletService)

    def test_instruments_service_and_store(
        self, store: InMemoryTransactionalStore, time_provider: FixedTimeProvider
    ) -> None:
        registry = CollectorRegistry()
        service = build_wallet_service(
            settings=make_settings(),
            store=store,
            time_provider=time_provider,
            metrics=WalletMetrics(prefix="test", registry=registry),
        )

        service.apply_payment(PaymentRequest(from_id=1, to_id=2, amount="5"))

        assert isinstance(service, InstrumentingWalletService)
        labels = {"method": "apply_payment", "error": "false"}
        assert registry.get_sample_value("test_queries_count", labels) == 1
        assert (
            registry.get_sample_value(
                "test_storage_queries_count", {"method": "commit", "error": "false"}
            )
            == 1
        )

    def test_uses_configured_opening_balance(
        self, store: InMemoryTransactionalStore, time_provider: FixedTimeProvider
    ) -> None:
        settings = make_settings(ledger=LedgerSettings(default_opening_balance="50"))
        service = build_wallet_service(settings=settings, store=store, time_provider=time_provider)

        service.apply_payment(PaymentRequest(from_id=1, to_id=2, amount="20"))

        assert service.get_account(1).balance.to_text() == "30.00"
        assert service.get_account(2).balance.to_text() == "70.00"

    def test_builds_sql_store_from_settings(self, fixed_time: datetime) -> None:
        service = build_wallet_service(
            settings=make_settings(), time_provider=FixedTimeProvider(fixed_time)
        )

        payment = service.apply_payment(PaymentRequest(from_id=3, to_id=4, amount="10.13"))

        assert payment.id is not None
        assert service.get_payments(4) == [payment]
        assert service.get_account(3).balance.to_text() == "989.87"


class TestCreateStore:
    def test_creates_schema(self) -> None:
        store = create_store(make_settings())

        assert isinstance(store, SqlAlchemyTransactionalStore)
        with store.begin() as uow:
            assert uow.get_payments(1) == []

    def test_in_memory_database_runs_units_one_at_a_time(self) -> None:
        store = create_store(make_settings())

        assert store.exclusive

    def test_file_database_shares_no_connection(self, tmp_path) -> None:
        settings = Settings(database=DatabaseSettings(url=f"sqlite:///{tmp_path / 'wallet.db'}"))

        store = create_store(settings)

        assert not store.exclusive
