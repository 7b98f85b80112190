"""Payment entity and the transient request it is built from."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from wallet_core.domain.value_objects import Money

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    """Caller input for a transfer. Not persisted.

    amount is kept as the caller's text until validation parses it.
    """

    from_id: int
    to_id: int
    amount: str


@dataclass(frozen=True, slots=True)
class Payment:
    """Immutable record of a validated, timestamped transfer.

    id is None until the store assigns one on insert. Payments are never
    mutated or deleted once stored; they form an append-only audit log.
    """

    id: int | None
    from_id: int
    to_id: int
    amount: Money
    created_at: datetime

    @classmethod
    def from_request(
        cls, request: PaymentRequest, amount: Money, created_at: datetime
    ) -> Payment:
        """Build an unsaved payment from a validated request.

        amount is the value validation parsed from request.amount; the text
        is not parsed again.
        """
        return cls(
            id=None,
            from_id=request.from_id,
            to_id=request.to_id,
            amount=amount,
            created_at=created_at,
        )

    def with_id(self, payment_id: int) -> Payment:
        """Return the stored copy carrying the store-assigned id."""
        return replace(self, id=payment_id)

    def involves(self, account_id: int) -> bool:
        return account_id in (self.from_id, self.to_id)
