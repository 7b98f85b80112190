"""Tests for GetAccountUseCase and GetPaymentsUseCase."""

from datetime import UTC, datetime

import pytest

from wallet_core.application.cancellation import CancellationToken
from wallet_core.application.use_cases import (
    ApplyPaymentUseCase,
    GetAccountUseCase,
    GetPaymentsUseCase,
)
from wallet_core.domain.entities import Account, PaymentRequest
from wallet_core.domain.exceptions import (
    AccountNotFoundError,
    InvalidAccountError,
    OperationCancelledError,
)
from wallet_core.domain.value_objects import Money
from wallet_core.infrastructure.in_memory_store import InMemoryTransactionalStore
from wallet_core.infrastructure.time_provider import FixedTimeProvider


@pytest.fixture
def apply_payment(
    store: InMemoryTransactionalStore, time_provider: FixedTimeProvider
) -> ApplyPaymentUseCase:
    return ApplyPaymentUseCase(store=store, time_provider=time_provider)


# =============================================================================
# GetAccount
# =============================================================================


class TestGetAccount:
    def test_returns_stored_account(self, store: InMemoryTransactionalStore) -> None:
        account = Account(
            id=5, balance=Money.parse("12.50"), created_at=datetime(2024, 1, 1, tzinfo=UTC)
        )
        with store.begin() as uow:
            uow.upsert_accounts([account])
            uow.commit()

        assert GetAccountUseCase(store).execute(5) == account

    def test_unknown_account_is_not_found(self, store: InMemoryTransactionalStore) -> None:
        """Lookups never materialize the default account."""
        with pytest.raises(AccountNotFoundError) as exc_info:
            GetAccountUseCase(store).execute(99)

        assert exc_info.value.account_id == 99

    @pytest.mark.parametrize("account_id", [0, -1])
    def test_invalid_id(self, store: InMemoryTransactionalStore, account_id: int) -> None:
        with pytest.raises(InvalidAccountError):
            GetAccountUseCase(store).execute(account_id)

    def test_reflects_committed_transfer(
        self, store: InMemoryTransactionalStore, apply_payment: ApplyPaymentUseCase
    ) -> None:
        apply_payment.execute(PaymentRequest(from_id=1, to_id=2, amount="0.5"))

        assert GetAccountUseCase(store).execute(1).balance.to_text() == "999.50"

    def test_cancelled_token(self, store: InMemoryTransactionalStore) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            GetAccountUseCase(store).execute(1, token)


# =============================================================================
# GetPayments
# =============================================================================


class TestGetPayments:
    def test_returns_payments_as_sender_or_receiver(
        self, store: InMemoryTransactionalStore, apply_payment: ApplyPaymentUseCase
    ) -> None:
        sent = apply_payment.execute(PaymentRequest(from_id=1, to_id=2, amount="1"))
        received = apply_payment.execute(PaymentRequest(from_id=3, to_id=1, amount="2"))
        apply_payment.execute(PaymentRequest(from_id=2, to_id=3, amount="3"))

        payments = GetPaymentsUseCase(store).execute(1)

        assert sorted(payments, key=lambda p: p.id) == [sent, received]

    def test_unknown_account_has_no_payments(self, store: InMemoryTransactionalStore) -> None:
        assert GetPaymentsUseCase(store).execute(42) == []

    def test_invalid_id(self, store: InMemoryTransactionalStore) -> None:
        with pytest.raises(InvalidAccountError):
            GetPaymentsUseCase(store).execute(0)

    def test_lookup_releases_store(
        self, store: InMemoryTransactionalStore, apply_payment: ApplyPaymentUseCase
    ) -> None:
        GetPaymentsUseCase(store).execute(1)

        # A leaked unit of work would block this transfer forever
        token = CancellationToken.with_timeout(5)
        apply_payment.execute(PaymentRequest(from_id=1, to_id=2, amount="1"), token)
