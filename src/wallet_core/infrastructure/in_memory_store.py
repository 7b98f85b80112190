from __future__ import annotations

import copy
from dataclasses import replace
from threading import Lock
from typing import TYPE_CHECKING

from wallet_core.application.ports import TransactionalStore, UnitOfWork
from wallet_core.domain.exceptions import AccountNotFoundError, CommitFailedError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.domain.entities import Account, Payment

# How often a waiting begin() re-checks the caller's cancellation token.
_LOCK_POLL_SECONDS = 0.05


class InMemoryTransactionalStore(TransactionalStore):
    """Dict-backed store for tests and local runs.

    Implementation notes:
    - One unit of work at a time: a store-wide lock is held from begin()
      until commit() or rollback(), which makes every unit of work serializable
    - Writes are staged in the unit of work and applied on commit()
    - Returns deep copies from reads to mimic database detachment
    - Payment ids come from a sequence starting at 1; ids handed out by a
      rolled-back unit of work are reused
    """

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._payments: list[Payment] = []
        self._next_payment_id = 1
        self._lock = Lock()

    def begin(self, cancellation: CancellationToken | None = None) -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork(self, cancellation)
        # Wait for the lock without ignoring the caller's token
        while not self._lock.acquire(timeout=_LOCK_POLL_SECONDS):
            uow._check_cancelled()
        try:
            uow._check_cancelled()
        except BaseException:
            self._lock.release()
            raise
        return uow

    def _release(self) -> None:
        self._lock.release()


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of work over an InMemoryTransactionalStore.

    Holds the store lock for its whole lifetime; created only by
    InMemoryTransactionalStore.begin().
    """

    def __init__(
        self,
        store: InMemoryTransactionalStore,
        cancellation: CancellationToken | None = None,
    ) -> None:
        super().__init__(cancellation)
        self._store = store
        self._staged_accounts: dict[int, Account] = {}
        self._staged_payments: list[Payment] = []

    def get_accounts(self, ids: Iterable[int]) -> list[Account]:
        self._check_cancelled()
        accounts = []
        for account_id in dict.fromkeys(ids):
            account = self._lookup(account_id)
            if account is not None:
                accounts.append(copy.deepcopy(account))
        return accounts

    def get_account(self, account_id: int) -> Account:
        self._check_cancelled()
        account = self._lookup(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return copy.deepcopy(account)

    def upsert_accounts(self, accounts: Sequence[Account]) -> None:
        self._check_cancelled()
        for account in accounts:
            existing = self._lookup(account.id)
            if existing is not None:
                # Only the balance is updatable on conflict
                account = replace(existing, balance=account.balance)
            self._staged_accounts[account.id] = copy.deepcopy(account)

    def insert_payment(self, payment: Payment) -> Payment:
        self._check_cancelled()
        payment_id = self._store._next_payment_id + len(self._staged_payments)
        stored = payment.with_id(payment_id)
        self._staged_payments.append(stored)
        return stored

    def get_payments(self, account_id: int) -> list[Payment]:
        self._check_cancelled()
        return [
            copy.deepcopy(p)
            for p in (*self._store._payments, *self._staged_payments)
            if p.involves(account_id)
        ]

    def commit(self) -> None:
        if self._finished:
            raise CommitFailedError("unit of work is already finished")
        self._check_cancelled()
        store = self._store
        store._accounts.update(self._staged_accounts)
        store._payments.extend(self._staged_payments)
        store._next_payment_id += len(self._staged_payments)
        self._finish()

    def rollback(self) -> None:
        if self._finished:
            return
        self._staged_accounts.clear()
        self._staged_payments.clear()
        self._finish()

    def _lookup(self, account_id: int) -> Account | None:
        if account_id in self._staged_accounts:
            return self._staged_accounts[account_id]
        return self._store._accounts.get(account_id)

    def _finish(self) -> None:
        self._finished = True
        self._store._release()
