"""Error classification for delivery adapters.

Adapters decide status codes from the category, never from message text:
    CLIENT_FAULT -> 400, NOT_FOUND -> 404, INTERNAL -> 500
"""

from __future__ import annotations

from wallet_core.domain.exceptions import DomainException, ErrorCategory

INTERNAL_ERROR_MESSAGE = "internal error"


def error_category(exc: BaseException) -> ErrorCategory:
    """Category of any exception; anything outside the taxonomy is INTERNAL."""
    if isinstance(exc, DomainException):
        return exc.category
    return ErrorCategory.INTERNAL


def public_message(exc: BaseException) -> str:
    """Message safe to show a client. Internal failures leak no storage detail."""
    if error_category(exc) is ErrorCategory.INTERNAL:
        return INTERNAL_ERROR_MESSAGE
    return str(exc)
