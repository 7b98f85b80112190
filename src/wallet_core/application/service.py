"""WalletService interface, its default implementation and decorators.

Decorators implement the same interface and wrap another WalletService,
so they compose in any order around the core without touching it:

    service = InstrumentingWalletService(
        LoggingWalletService(DefaultWalletService(...)), histogram
    )
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TypeVar

from wallet_core.application.errors import error_category
from wallet_core.logging_config import get_logger
from wallet_core.metrics import observe_call

if TYPE_CHECKING:
    from collections.abc import Callable
    from logging import Logger

    from prometheus_client import Histogram

    from wallet_core.application.cancellation import CancellationToken
    from wallet_core.application.use_cases import (
        ApplyPaymentUseCase,
        GetAccountUseCase,
        GetPaymentsUseCase,
    )
    from wallet_core.domain.entities import Account, Payment, PaymentRequest

T = TypeVar("T")


class WalletService(ABC):
    """Operations exposed to delivery adapters (HTTP, CLI, ...)."""

    @abstractmethod
    def apply_payment(
        self, request: PaymentRequest, cancellation: CancellationToken | None = None
    ) -> Payment: ...

    @abstractmethod
    def get_account(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> Account: ...

    @abstractmethod
    def get_payments(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> list[Payment]: ...


class DefaultWalletService(WalletService):
    """Delegates each operation to its use case."""

    def __init__(
        self,
        apply_payment: ApplyPaymentUseCase,
        get_account: GetAccountUseCase,
        get_payments: GetPaymentsUseCase,
    ) -> None:
        self._apply_payment = apply_payment
        self._get_account = get_account
        self._get_payments = get_payments

    def apply_payment(
        self, request: PaymentRequest, cancellation: CancellationToken | None = None
    ) -> Payment:
        return self._apply_payment.execute(request, cancellation)

    def get_account(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> Account:
        return self._get_account.execute(account_id, cancellation)

    def get_payments(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> list[Payment]:
        return self._get_payments.execute(account_id, cancellation)


class LoggingWalletService(WalletService):
    """Logs failed calls at ERROR and successful ones at DEBUG.

    Errors are always re-raised unchanged.
    """

    def __init__(self, next_service: WalletService, logger: Logger | None = None) -> None:
        self._next = next_service
        self._logger = logger or get_logger("service")

    def apply_payment(
        self, request: PaymentRequest, cancellation: CancellationToken | None = None
    ) -> Payment:
        return self._call(
            "apply_payment", lambda: self._next.apply_payment(request, cancellation)
        )

    def get_account(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> Account:
        return self._call(
            "get_account", lambda: self._next.get_account(account_id, cancellation)
        )

    def get_payments(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> list[Payment]:
        return self._call(
            "get_payments", lambda: self._next.get_payments(account_id, cancellation)
        )

    def _call(self, method: str, fn: Callable[[], T]) -> T:
        started_at = time.perf_counter()
        try:
            result = fn()
        except Exception as e:
            self._logger.error(
                "wallet_service_call_failed",
                extra={
                    "method": method,
                    "error_type": type(e).__name__,
                    "error_category": error_category(e).value,
                    "error": str(e),
                    "took_ms": _elapsed_ms(started_at),
                },
            )
            raise
        self._logger.debug(
            "wallet_service_call_succeeded",
            extra={"method": method, "took_ms": _elapsed_ms(started_at)},
        )
        return result


class InstrumentingWalletService(WalletService):
    """Records the duration of every call, labelled by method and outcome."""

    def __init__(self, next_service: WalletService, histogram: Histogram) -> None:
        self._next = next_service
        self._histogram = histogram

    def apply_payment(
        self, request: PaymentRequest, cancellation: CancellationToken | None = None
    ) -> Payment:
        return self._call(
            "apply_payment", lambda: self._next.apply_payment(request, cancellation)
        )

    def get_account(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> Account:
        return self._call(
            "get_account", lambda: self._next.get_account(account_id, cancellation)
        )

    def get_payments(
        self, account_id: int, cancellation: CancellationToken | None = None
    ) -> list[Payment]:
        return self._call(
            "get_payments", lambda: self._next.get_payments(account_id, cancellation)
        )

    def _call(self, method: str, fn: Callable[[], T]) -> T:
        started_at = time.perf_counter()
        try:
            result = fn()
        except Exception:
            observe_call(self._histogram, method, started_at, failed=True)
            raise
        observe_call(self._histogram, method, started_at, failed=False)
        return result


def _elapsed_ms(started_at: float) -> float:
    return round((time.perf_counter() - started_at) * 1000, 3)
