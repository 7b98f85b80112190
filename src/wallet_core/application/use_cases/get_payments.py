from __future__ import annotations

from typing import TYPE_CHECKING

from wallet_core.domain.validation import validate_account_id

if TYPE_CHECKING:
    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.application.ports import TransactionalStore
    from wallet_core.domain.entities import Payment


class GetPaymentsUseCase:
    """Lists payments where an account is sender or receiver."""

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def execute(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> list[Payment]:
        """Return payments touching the account, in store-native order.

        An account without payments (or without a record) yields [].

        Raises:
            InvalidAccountError: account_id <= 0.
            StorageError: The store failed.
        """
        validate_account_id(account_id)

        with self._store.begin(cancellation) as uow:
            return uow.get_payments(account_id)
