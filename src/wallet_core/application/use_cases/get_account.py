from __future__ import annotations

from typing import TYPE_CHECKING

from wallet_core.domain.validation import validate_account_id

if TYPE_CHECKING:
    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.application.ports import TransactionalStore
    from wallet_core.domain.entities import Account


class GetAccountUseCase:
    """Looks up a single stored account."""

    def __init__(self, store: TransactionalStore) -> None:
        self._store = store

    def execute(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> Account:
        """Return the stored account.

        Unlike a transfer, a lookup never materializes a default account.

        Raises:
            InvalidAccountError: account_id <= 0.
            AccountNotFoundError: No record exists.
            StorageError: The store failed.
        """
        validate_account_id(account_id)

        with self._store.begin(cancellation) as uow:
            return uow.get_account(account_id)
