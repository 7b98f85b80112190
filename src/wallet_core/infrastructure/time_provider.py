from datetime import UTC, datetime, timedelta

from wallet_core.application.ports import TimeProvider


class SystemTimeProvider(TimeProvider):
    """Wall clock in UTC; stamps payments and newly materialized accounts."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedTimeProvider(TimeProvider):
    """Controllable UTC clock for tests.

    With a non-zero step every now() call moves the clock forward by that
    step, so two reads within one transfer would yield different instants.
    Not synchronized: move the clock only while no transfer is running.
    """

    def __init__(self, start: datetime, step: timedelta = timedelta(0)) -> None:
        _require_utc(start)
        if step < timedelta(0):
            raise ValueError(f"step must not be negative, got {step}")
        self._current = start
        self._step = step

    def now(self) -> datetime:
        current = self._current
        self._current = current + self._step
        return current

    def advance(self, delta: timedelta) -> None:
        if delta < timedelta(0):
            raise ValueError(f"clock cannot move backwards, got {delta}")
        self._current += delta


def _require_utc(dt: datetime) -> None:
    if dt.tzinfo is not UTC:
        raise ValueError(f"datetime must have tzinfo=UTC, got tzinfo={dt.tzinfo}")
