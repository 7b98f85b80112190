from __future__ import annotations

from typing import TYPE_CHECKING

from wallet_core.domain.entities import DEFAULT_OPENING_BALANCE, Account, Payment
from wallet_core.domain.exceptions import InvalidPaymentRequestError, PaymentValidationError
from wallet_core.domain.validation import validate_payment_request
from wallet_core.logging_config import get_logger

if TYPE_CHECKING:
    from datetime import datetime

    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.application.ports import TimeProvider, TransactionalStore, UnitOfWork
    from wallet_core.domain.entities import PaymentRequest
    from wallet_core.domain.value_objects import Money

logger = get_logger("use_cases.apply_payment")


class ApplyPaymentUseCase:
    """Orchestrates a transfer between two accounts.

    Responsibilities:
    - Validate the request before any store call
    - Read both accounts in one batched fetch, materializing missing ones
    - Debit the sender, then credit the receiver (a failed debit never credits)
    - Upsert both accounts and append the payment in the same unit of work

    Either both balances change and the payment is recorded, or nothing is
    written. Concurrency control is entirely the store's: this class holds
    no locks and no shared mutable state.
    """

    def __init__(
        self,
        store: TransactionalStore,
        time_provider: TimeProvider,
        opening_balance: Money = DEFAULT_OPENING_BALANCE,
    ) -> None:
        self._store = store
        self._time_provider = time_provider
        self._opening_balance = opening_balance

    def execute(
        self,
        request: PaymentRequest,
        cancellation: CancellationToken | None = None,
    ) -> Payment:
        """Apply a payment request.

        Args:
            request: Sender, receiver and amount text.
            cancellation: Optional signal; once fired, the unit of work rolls back.

        Returns:
            The recorded Payment, carrying its store-assigned id.

        Raises:
            InvalidPaymentRequestError: Request failed validation (no store call made).
            InsufficientFundsError: Sender balance is below the amount.
            MismatchedPaymentError: Internal consistency error.
            StorageError: Any failure opening, reading, writing or committing.
        """
        # Step 1: Validate before touching the store
        try:
            amount = validate_payment_request(request)
        except PaymentValidationError as e:
            raise InvalidPaymentRequestError(e) from e

        # Step 2: One clock reading for the payment and any new accounts
        now = self._time_provider.now()
        payment = Payment.from_request(request, amount, created_at=now)

        # Steps 3-5: All-or-nothing unit of work
        with self._store.begin(cancellation) as uow:
            sender, receiver = self._fetch_accounts(uow, payment, now)

            sender = sender.apply_payment(payment)
            receiver = receiver.apply_payment(payment)

            uow.upsert_accounts([sender, receiver])
            stored = uow.insert_payment(payment)
            uow.commit()

        logger.debug(
            "payment_applied",
            extra={
                "payment_id": stored.id,
                "from_id": stored.from_id,
                "to_id": stored.to_id,
                "amount": str(stored.amount),
            },
        )
        return stored

    def _fetch_accounts(
        self, uow: UnitOfWork, payment: Payment, now: datetime
    ) -> tuple[Account, Account]:
        """Fetch sender and receiver, materializing whichever has no record."""
        found = {
            account.id: account
            for account in uow.get_accounts([payment.from_id, payment.to_id])
        }

        sender = found.get(payment.from_id)
        if sender is None:
            sender = Account.materialize(payment.from_id, now, self._opening_balance)

        receiver = found.get(payment.to_id)
        if receiver is None:
            receiver = Account.materialize(payment.to_id, now, self._opening_balance)

        return sender, receiver
