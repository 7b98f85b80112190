"""Domain entities - Objects with identity and lifecycle."""

from wallet_core.domain.entities.account import DEFAULT_OPENING_BALANCE, Account
from wallet_core.domain.entities.payment import Payment, PaymentRequest

__all__ = [
    "DEFAULT_OPENING_BALANCE",
    "Account",
    "Payment",
    "PaymentRequest",
]
