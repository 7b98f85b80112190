from __future__ import annotations

import time
from threading import Event
from typing import TYPE_CHECKING

from wallet_core.domain.exceptions import OperationCancelledError

if TYPE_CHECKING:
    from collections.abc import Callable


class CancellationToken:
    """Caller-owned cancellation signal carried into every store call.

    Fires when cancel() is called or once the optional deadline passes.
    Deadlines use a monotonic clock, so wall-clock changes do not affect them.
    Safe to cancel from another thread.
    """

    def __init__(
        self,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = Event()
        self._deadline = deadline
        self._clock = clock

    @classmethod
    def with_timeout(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> CancellationToken:
        return cls(deadline=clock() + seconds, clock=clock)

    @classmethod
    def none(cls) -> CancellationToken:
        """A token that only fires if cancel() is called on it."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("operation was cancelled by the caller")
        if self.cancelled:
            raise OperationCancelledError("operation deadline exceeded")
