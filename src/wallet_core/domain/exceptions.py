"""Domain exceptions for wallet-core.

Exception hierarchy:
    DomainException (base)
    ├── Validation Errors (client fault)
    │   ├── PaymentValidationError
    │   │   ├── MalformedAmountError
    │   │   ├── NotPositiveAmountError
    │   │   ├── InvalidAccountError
    │   │   └── SameAccountError
    │   └── InvalidPaymentRequestError (wraps a PaymentValidationError)
    ├── Balance Errors
    │   ├── InsufficientFundsError (client fault)
    │   └── MismatchedPaymentError (invariant violation)
    ├── Not Found Errors
    │   └── AccountNotFoundError
    └── Storage Errors (internal)
        └── StorageError
            ├── StoreUnavailableError
            ├── CommitFailedError
            └── OperationCancelledError

Each class carries an ErrorCategory so delivery adapters can pick a status
without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decimal import Decimal


class ErrorCategory(Enum):
    """How an error is reported to the caller."""

    CLIENT_FAULT = "client_fault"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class DomainException(Exception):
    """Base exception for all wallet-core errors.

    All domain exceptions inherit from this class to enable
    catching domain errors distinctly from unexpected failures.
    """

    category: ErrorCategory = ErrorCategory.INTERNAL


# =============================================================================
# Validation Errors
# =============================================================================


class PaymentValidationError(DomainException):
    """Base for checks that reject a payment request before any mutation."""

    category = ErrorCategory.CLIENT_FAULT


class MalformedAmountError(PaymentValidationError):
    """Raised when amount text is not a valid decimal literal.

    Comma decimal separators ("10,1"), blanks and non-finite values
    ("NaN", "Infinity") are all malformed.
    """

    def __init__(self, text: str) -> None:
        super().__init__(f"can't convert {text!r} to decimal")
        self.text = text


class NotPositiveAmountError(PaymentValidationError):
    """Raised when a payment amount is zero or negative."""

    def __init__(self, amount: Decimal) -> None:
        super().__init__(f"payment amount is not positive: {amount}")
        self.amount = amount


class InvalidAccountError(PaymentValidationError):
    """Raised when an account id is not a positive integer."""

    def __init__(self, account_id: int, field: str | None = None) -> None:
        subject = f"account {field}" if field else "account id"
        super().__init__(f"{subject} must be positive, got {account_id}")
        self.account_id = account_id
        self.field = field


class SameAccountError(PaymentValidationError):
    """Raised when sender and receiver are the same account."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"from and to must be different, both are {account_id}")
        self.account_id = account_id


class InvalidPaymentRequestError(DomainException):
    """Raised by the transfer workflow when its request fails validation.

    The underlying PaymentValidationError is available as `reason` and is
    also chained as __cause__. No unit of work is opened.
    """

    category = ErrorCategory.CLIENT_FAULT

    def __init__(self, reason: PaymentValidationError) -> None:
        super().__init__(f"payment is invalid: {reason}")
        self.reason = reason


# =============================================================================
# Balance Errors
# =============================================================================


class InsufficientFundsError(DomainException):
    """Raised when the sender's balance is below the payment amount.

    The sender account is left unmodified. Exact exhaustion (balance equal
    to amount) is allowed.
    """

    category = ErrorCategory.CLIENT_FAULT

    def __init__(self, account_id: int, balance: Decimal, amount: Decimal) -> None:
        super().__init__(
            f"not enough funds in account {account_id}: balance {balance}, amount {amount}"
        )
        self.account_id = account_id
        self.balance = balance
        self.amount = amount


class MismatchedPaymentError(DomainException):
    """Raised when a payment is applied to an account it does not involve.

    This is an INVARIANT VIOLATION, not a client error: the workflow only
    ever applies a payment to its own sender and receiver.
    """

    def __init__(self, account_id: int, from_id: int, to_id: int) -> None:
        super().__init__(
            f"payment {from_id}->{to_id} does not involve account {account_id}"
        )
        self.account_id = account_id


# =============================================================================
# Not Found Errors
# =============================================================================


class AccountNotFoundError(DomainException):
    """Raised when a direct account lookup finds no stored record.

    Transfers never raise this: they materialize missing accounts instead.
    """

    category = ErrorCategory.NOT_FOUND

    def __init__(self, account_id: int) -> None:
        super().__init__(f"account {account_id} is not found")
        self.account_id = account_id


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(DomainException):
    """Base for any failure opening, reading, writing or committing a unit of work.

    Reported to clients as an opaque internal failure.
    """


class StoreUnavailableError(StorageError):
    """Raised when a unit of work cannot be started."""


class CommitFailedError(StorageError):
    """Raised when commit fails.

    The caller must assume the operation did not take effect; the store
    guarantees it was applied entirely or not at all.
    """


class OperationCancelledError(StorageError):
    """Raised when the caller's cancellation token fires during a store call."""
