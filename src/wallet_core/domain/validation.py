"""Pure request checks, run before any unit of work is opened."""

from __future__ import annotations

from typing import TYPE_CHECKING

from wallet_core.domain.exceptions import (
    InvalidAccountError,
    NotPositiveAmountError,
    SameAccountError,
)
from wallet_core.domain.value_objects import Money

if TYPE_CHECKING:
    from wallet_core.domain.entities import PaymentRequest


def validate_payment_request(request: PaymentRequest) -> Money:
    """Check a payment request, stopping at the first failing rule.

    Order: amount parses, amount > 0, from > 0, to > 0, from != to.

    Returns:
        The parsed amount.

    Raises:
        MalformedAmountError, NotPositiveAmountError, InvalidAccountError,
        SameAccountError.
    """
    amount = Money.parse(request.amount)
    if not amount.is_positive():
        raise NotPositiveAmountError(amount.value)
    if request.from_id <= 0:
        raise InvalidAccountError(request.from_id, field="from")
    if request.to_id <= 0:
        raise InvalidAccountError(request.to_id, field="to")
    if request.from_id == request.to_id:
        raise SameAccountError(request.from_id)
    return amount


def validate_account_id(account_id: int) -> None:
    if account_id <= 0:
        raise InvalidAccountError(account_id)
