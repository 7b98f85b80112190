from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from wallet_core.domain.exceptions import MalformedAmountError

CENT = Decimal("0.01")
# Longest accepted amount text, and the longest plain ("f") rendering of a
# parsed amount. Matches the width of the stored amount and balance columns.
MAX_TEXT_LENGTH = 64
# Wide enough that sums of two maximal amounts never lose digits before rounding.
WORKING_PRECISION = 2 * MAX_TEXT_LENGTH + 2

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True, slots=True)
class Money:
    """Fixed-point currency amount.

    Arithmetic keeps full precision; rounding to cents (half-up) happens
    only through rounded()/to_text(), i.e. at the point of storage.
    """

    value: Decimal

    @classmethod
    def parse(cls, text: str) -> Money:
        """Parse decimal text exactly.

        Only plain ASCII literals are accepted: an optional sign, digits with
        an optional "." fraction and an optional exponent. Underscore
        grouping, non-ASCII digits, NaN and Infinity are rejected even though
        Decimal() itself takes them.

        Raises:
            MalformedAmountError: If text is not such a literal, or its plain
                rendering would exceed MAX_TEXT_LENGTH characters.
        """
        if not isinstance(text, str):
            raise MalformedAmountError(str(text))
        if len(text) > MAX_TEXT_LENGTH or not _DECIMAL_LITERAL.fullmatch(text):
            raise MalformedAmountError(text)
        try:
            value = Decimal(text)
        except InvalidOperation as e:
            raise MalformedAmountError(text) from e
        # "1E-1000000" is short text but renders to a million characters
        if abs(value.as_tuple().exponent) > MAX_TEXT_LENGTH:
            raise MalformedAmountError(text)
        if len(format(value, "f")) > MAX_TEXT_LENGTH:
            raise MalformedAmountError(text)
        return cls(value=value)

    def is_positive(self) -> bool:
        return self.value > 0

    def less_than(self, other: Money) -> bool:
        return self.value < other.value

    def add(self, other: Money) -> Money:
        with localcontext() as ctx:
            ctx.prec = WORKING_PRECISION
            return Money(value=self.value + other.value)

    def subtract(self, other: Money) -> Money:
        with localcontext() as ctx:
            ctx.prec = WORKING_PRECISION
            return Money(value=self.value - other.value)

    def rounded(self) -> Money:
        """Return the amount rounded half-up to exactly two fractional digits."""
        with localcontext() as ctx:
            ctx.prec = WORKING_PRECISION
            return Money(value=self.value.quantize(CENT, rounding=ROUND_HALF_UP))

    def to_text(self) -> str:
        """Storage representation, e.g. "499.00"."""
        return format(self.rounded().value, "f")

    def __str__(self) -> str:
        return format(self.value, "f")
