from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, TypeVar

from wallet_core.application.ports import TransactionalStore, UnitOfWork
from wallet_core.metrics import observe_call

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from prometheus_client import Histogram

    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.domain.entities import Account, Payment

T = TypeVar("T")


class InstrumentingTransactionalStore(TransactionalStore):
    """Wraps any store and records the duration of each call.

    begin() is recorded as method "begin"; unit-of-work calls under their own
    names. Cancellation and error translation stay with the wrapped store.
    """

    def __init__(self, inner: TransactionalStore, histogram: Histogram) -> None:
        self._inner = inner
        self._histogram = histogram

    def begin(self, cancellation: CancellationToken | None = None) -> InstrumentingUnitOfWork:
        uow = _timed(self._histogram, "begin", self._inner.begin, cancellation)
        return InstrumentingUnitOfWork(uow, self._histogram)


class InstrumentingUnitOfWork(UnitOfWork):
    def __init__(self, inner: UnitOfWork, histogram: Histogram) -> None:
        super().__init__()
        self._inner = inner
        self._histogram = histogram

    def get_accounts(self, ids: Iterable[int]) -> list[Account]:
        return _timed(self._histogram, "get_accounts", self._inner.get_accounts, ids)

    def get_account(self, account_id: int) -> Account:
        return _timed(self._histogram, "get_account", self._inner.get_account, account_id)

    def upsert_accounts(self, accounts: Sequence[Account]) -> None:
        _timed(self._histogram, "upsert_accounts", self._inner.upsert_accounts, accounts)

    def insert_payment(self, payment: Payment) -> Payment:
        return _timed(self._histogram, "insert_payment", self._inner.insert_payment, payment)

    def get_payments(self, account_id: int) -> list[Payment]:
        return _timed(self._histogram, "get_payments", self._inner.get_payments, account_id)

    def commit(self) -> None:
        _timed(self._histogram, "commit", self._inner.commit)
        self._finished = True

    def rollback(self) -> None:
        if self._finished:
            return
        self._finished = True
        _timed(self._histogram, "rollback", self._inner.rollback)


def _timed(histogram: Histogram, method: str, fn: Callable[..., T], *args: Any) -> T:
    started_at = time.perf_counter()
    try:
        result = fn(*args)
    except Exception:
        observe_call(histogram, method, started_at, failed=True)
        raise
    observe_call(histogram, method, started_at, failed=False)
    return result
