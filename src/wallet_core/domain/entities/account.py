"""Account entity and its balance mutation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from wallet_core.domain.exceptions import InsufficientFundsError, MismatchedPaymentError
from wallet_core.domain.value_objects import Money

if TYPE_CHECKING:
    from datetime import datetime

    from wallet_core.domain.entities.payment import Payment

DEFAULT_OPENING_BALANCE = Money.parse("1000")


@dataclass(frozen=True, slots=True)
class Account:
    """Account entity: identity, current balance and creation time.

    Account is immutable (frozen dataclass). apply_payment() returns a new
    Account; the instance it was called on is never modified, so a failed
    mutation leaves the caller's copy exactly as it was.

    The balance is mutable current state. Payments are an audit log and
    balances are never recomputed from them.
    """

    id: int
    balance: Money
    created_at: datetime

    @classmethod
    def materialize(
        cls,
        account_id: int,
        created_at: datetime,
        opening_balance: Money = DEFAULT_OPENING_BALANCE,
    ) -> Account:
        """Synthesize an account that has no stored record yet.

        The result is in-memory only; it is persisted when a transfer
        involving it commits.
        """
        return cls(id=account_id, balance=opening_balance, created_at=created_at)

    def apply_payment(self, payment: Payment) -> Account:
        """Apply a payment as its sender (debit) or receiver (credit).

        Args:
            payment: A payment whose from_id or to_id is this account.

        Returns:
            New Account with the balance rounded to two fractional digits.

        Raises:
            InsufficientFundsError: Sender balance is below the amount.
            MismatchedPaymentError: The payment does not involve this account.
        """
        if self.id == payment.from_id:
            if self.balance.less_than(payment.amount):
                raise InsufficientFundsError(
                    self.id, self.balance.value, payment.amount.value
                )
            return replace(self, balance=self.balance.subtract(payment.amount).rounded())

        if self.id == payment.to_id:
            return replace(self, balance=self.balance.add(payment.amount).rounded())

        raise MismatchedPaymentError(self.id, payment.from_id, payment.to_id)
