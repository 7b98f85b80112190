"""Use cases - One class per operation exposed to delivery adapters."""

from wallet_core.application.use_cases.apply_payment import ApplyPaymentUseCase
from wallet_core.application.use_cases.get_account import GetAccountUseCase
from wallet_core.application.use_cases.get_payments import GetPaymentsUseCase

__all__ = [
    "ApplyPaymentUseCase",
    "GetAccountUseCase",
    "GetPaymentsUseCase",
]
