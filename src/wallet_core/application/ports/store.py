from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from wallet_core.application.cancellation import CancellationToken
from wallet_core.domain.exceptions import StorageError
from wallet_core.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType

    from wallet_core.domain.entities import Account, Payment

logger = get_logger("store")


class UnitOfWork(ABC):
    """Port for one atomic sequence of reads and writes.

    Contract:
    - Owned by exactly one caller; never shared across concurrent operations
    - Nothing written is visible to other units of work before commit()
    - Leaving the `with` block without commit() rolls everything back
    - Every call checks the cancellation token first and raises
      OperationCancelledError once it has fired
    - Driver exceptions are translated into StorageError subclasses

    Isolation note:
    The store must serialize conflicting read-modify-write sequences on the
    same account (row locks or serializable transactions). The transfer
    workflow relies on this and adds no locking of its own.

    Usage:
        with store.begin(cancellation) as uow:
            accounts = uow.get_accounts({1, 2})
            ...
            uow.commit()
    """

    def __init__(self, cancellation: CancellationToken | None = None) -> None:
        self._cancellation = cancellation or CancellationToken.none()
        self._finished = False

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._finished:
            return
        try:
            self.rollback()
        except StorageError:
            if exc is None:
                raise
            # The original failure wins; the rollback error is only reported.
            logger.error(
                "unit_of_work_rollback_failed",
                extra={"original_error": type(exc).__name__},
                exc_info=True,
            )

    def _check_cancelled(self) -> None:
        self._cancellation.raise_if_cancelled()

    @abstractmethod
    def get_accounts(self, ids: Iterable[int]) -> list[Account]:
        """Fetch the accounts whose id is in ids, in one batched read.

        Missing ids are simply absent from the result, not an error.
        Returned entities are copies; changing them does not affect the store.
        """

    @abstractmethod
    def get_account(self, account_id: int) -> Account:
        """Fetch one account.

        Raises:
            AccountNotFoundError: No record exists for account_id.
        """

    @abstractmethod
    def upsert_accounts(self, accounts: Sequence[Account]) -> None:
        """Insert new accounts, or overwrite only the balance of existing ids."""

    @abstractmethod
    def insert_payment(self, payment: Payment) -> Payment:
        """Append a payment and return it with the store-assigned id."""

    @abstractmethod
    def get_payments(self, account_id: int) -> list[Payment]:
        """All payments where the account is sender or receiver.

        Order is whatever the store returns naturally; callers that need
        chronological order must sort by created_at.
        """

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit of work durable and visible.

        Raises:
            CommitFailedError: The effect is indeterminate to the caller but
                all-or-nothing at the store.
            OperationCancelledError: The token fired before commit.
        """

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write of this unit of work. Best-effort."""


class TransactionalStore(ABC):
    """Port for obtaining units of work against the ledger store."""

    @abstractmethod
    def begin(self, cancellation: CancellationToken | None = None) -> UnitOfWork:
        """Open a new unit of work.

        Args:
            cancellation: Caller's signal, checked on every call of the
                returned unit of work.

        Raises:
            StoreUnavailableError: The store cannot start a unit of work.
            OperationCancelledError: The token has already fired.
        """
