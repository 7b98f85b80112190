from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import TYPE_CHECKING

from sqlalchemy import or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from wallet_core.application.ports import TransactionalStore, UnitOfWork
from wallet_core.domain.exceptions import (
    AccountNotFoundError,
    CommitFailedError,
    StorageError,
    StoreUnavailableError,
)
from wallet_core.infrastructure.orm import AccountRecord, PaymentRecord
from wallet_core.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from sqlalchemy.orm import Session, sessionmaker

    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.domain.entities import Account, Payment

logger = get_logger("infrastructure.sql_store")

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# How often a waiting begin() re-checks the caller's cancellation token.
_LOCK_POLL_SECONDS = 0.05


class SqlAlchemyTransactionalStore(TransactionalStore):
    """Store backed by a relational database through SQLAlchemy.

    Each unit of work owns one Session and one database transaction. The
    isolation it gets is whatever the engine was configured with (see
    infrastructure.database); get_accounts() additionally takes row locks
    with SELECT ... FOR UPDATE where the backend supports them. On SQLite,
    which has no row locks, every unit of work takes the database write lock
    when it begins.

    With exclusive=True only one unit of work is open at a time. Engines
    whose sessions all share one connection (in-memory SQLite) need this,
    otherwise concurrent units of work would run inside one transaction.
    """

    def __init__(
        self, session_factory: sessionmaker[Session], exclusive: bool = False
    ) -> None:
        self._session_factory = session_factory
        self._lock = Lock() if exclusive else None

    @property
    def exclusive(self) -> bool:
        return self._lock is not None

    def begin(self, cancellation: CancellationToken | None = None) -> SqlAlchemyUnitOfWork:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        release = self._acquire(cancellation)
        try:
            session = self._session_factory()
            session.begin()
        except SQLAlchemyError as e:
            if release is not None:
                release()
            raise StoreUnavailableError(f"failed to begin unit of work: {e}") from e
        return SqlAlchemyUnitOfWork(session, cancellation, release=release)

    def _acquire(self, cancellation: CancellationToken | None) -> Callable[[], None] | None:
        if self._lock is None:
            return None
        while not self._lock.acquire(timeout=_LOCK_POLL_SECONDS):
            if cancellation is not None:
                cancellation.raise_if_cancelled()
        if cancellation is not None:
            try:
                cancellation.raise_if_cancelled()
            except BaseException:
                self._lock.release()
                raise
        return self._lock.release


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work wrapping a single SQLAlchemy Session transaction."""

    def __init__(
        self,
        session: Session,
        cancellation: CancellationToken | None = None,
        release: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(cancellation)
        self._session = session
        self._release = release

    def get_accounts(self, ids: Iterable[int]) -> list[Account]:
        self._check_cancelled()
        wanted = sorted(set(ids))
        if not wanted:
            return []
        # Sorted ids give concurrent transfers a consistent lock order
        stmt = (
            select(AccountRecord)
            .where(AccountRecord.id.in_(wanted))
            .order_by(AccountRecord.id)
            .with_for_update()
        )
        with self._translate_errors("get_accounts"):
            records = self._session.scalars(stmt).all()
        return [record.to_entity() for record in records]

    def get_account(self, account_id: int) -> Account:
        self._check_cancelled()
        with self._translate_errors("get_account"):
            record = self._session.get(AccountRecord, account_id)
        if record is None:
            raise AccountNotFoundError(account_id)
        return record.to_entity()

    def upsert_accounts(self, accounts: Sequence[Account]) -> None:
        self._check_cancelled()
        if not accounts:
            return
        with self._translate_errors("upsert_accounts"):
            insert = _UPSERT_INSERTS.get(self._session.get_bind().dialect.name)
            if insert is None:
                self._upsert_one_by_one(accounts)
                return
            stmt = insert(AccountRecord).values(
                [
                    {
                        "id": account.id,
                        "balance": account.balance.to_text(),
                        "created_at": account.created_at,
                    }
                    for account in accounts
                ]
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[AccountRecord.id],
                set_={"balance": stmt.excluded.balance},
            )
            self._session.execute(stmt)
            # Identity map may hold rows read earlier in this transaction
            self._session.expire_all()

    def insert_payment(self, payment: Payment) -> Payment:
        self._check_cancelled()
        record = PaymentRecord.from_entity(payment)
        with self._translate_errors("insert_payment"):
            self._session.add(record)
            self._session.flush()
        return payment.with_id(record.id)

    def get_payments(self, account_id: int) -> list[Payment]:
        self._check_cancelled()
        stmt = select(PaymentRecord).where(
            or_(
                PaymentRecord.from_account_id == account_id,
                PaymentRecord.to_account_id == account_id,
            )
        )
        with self._translate_errors("get_payments"):
            records = self._session.scalars(stmt).all()
        return [record.to_entity() for record in records]

    def commit(self) -> None:
        if self._finished:
            raise CommitFailedError("unit of work is already finished")
        self._check_cancelled()
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            raise CommitFailedError(f"failed to commit transaction: {e}") from e
        self._finish()

    def rollback(self) -> None:
        if self._finished:
            return
        try:
            self._session.rollback()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to rollback transaction: {e}") from e
        finally:
            self._finish()
        logger.debug("unit_of_work_rolled_back")

    def _finish(self) -> None:
        self._finished = True
        try:
            self._session.close()
        finally:
            if self._release is not None:
                self._release()

    def _upsert_one_by_one(self, accounts: Sequence[Account]) -> None:
        for account in accounts:
            record = self._session.get(AccountRecord, account.id)
            if record is None:
                self._session.add(AccountRecord.from_entity(account))
            else:
                record.balance = account.balance.to_text()
        self._session.flush()

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            raise StorageError(f"{operation} failed: {e}") from e
