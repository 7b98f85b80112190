"""Value objects - Immutable objects defined by their attributes."""

from wallet_core.domain.value_objects.money import Money

__all__ = [
    "Money",
]
