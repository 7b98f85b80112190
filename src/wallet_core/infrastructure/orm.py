"""SQLAlchemy ORM models for the ledger tables.

Balances and amounts are stored as exact decimal text ("499.00"), never as
floating point, so they round-trip through any backend unchanged.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from wallet_core.domain.entities import Account, Payment
from wallet_core.domain.value_objects import Money

# SQLite only autoincrements an INTEGER PRIMARY KEY.
_PaymentIdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base for wallet-core tables."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        int: BigInteger,
    }


class AccountRecord(Base):
    __tablename__ = "accounts"

    # Externally assigned, never generated
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    balance: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    @classmethod
    def from_entity(cls, account: Account) -> AccountRecord:
        return cls(
            id=account.id,
            balance=account.balance.to_text(),
            created_at=account.created_at,
        )

    def to_entity(self) -> Account:
        return Account(
            id=self.id,
            balance=Money.parse(self.balance),
            created_at=_as_utc(self.created_at),
        )


class PaymentRecord(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(_PaymentIdType, primary_key=True, autoincrement=True)
    from_account_id: Mapped[int] = mapped_column(index=True, nullable=False)
    to_account_id: Mapped[int] = mapped_column(index=True, nullable=False)
    amount: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    @classmethod
    def from_entity(cls, payment: Payment) -> PaymentRecord:
        return cls(
            id=payment.id,
            from_account_id=payment.from_id,
            to_account_id=payment.to_id,
            amount=str(payment.amount),
            created_at=payment.created_at,
        )

    def to_entity(self) -> Payment:
        return Payment(
            id=self.id,
            from_id=self.from_account_id,
            to_id=self.to_account_id,
            amount=Money.parse(self.amount),
            created_at=_as_utc(self.created_at),
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back; values were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
