"""Fixed-point money value type."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_CURRENCY = "USD"


class CurrencyMismatchError(ValueError):
    """Raised when two amounts in different currencies are combined."""

    def __init__(self, left: str, right: str):
        super().__init__(f"Currency mismatch: {left} vs {right}")
        self.left = left
        self.right = right


@dataclass(frozen=True)
class Money:
    """An amount in integer minor units (cents) with its currency code."""

    amount_cents: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if isinstance(self.amount_cents, bool) or not isinstance(self.amount_cents, int):
            raise TypeError(f"amount_cents must be an int, got {type(self.amount_cents).__name__}")
        if len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency!r}")
        object.__setattr__(self, "currency", self.currency.upper())

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(0, currency)

    def _check(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.amount_cents + other.amount_cents, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.amount_cents - other.amount_cents, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check(other)
        return self.amount_cents < other.amount_cents

    def __le__(self, other: Money) -> bool:
        self._check(other)
        return self.amount_cents <= other.amount_cents

    def __gt__(self, other: Money) -> bool:
        self._check(other)
        return self.amount_cents > other.amount_cents

    def __ge__(self, other: Money) -> bool:
        self._check(other)
        return self.amount_cents >= other.amount_cents

    def percentage(self, rate: Decimal) -> Money:
        """Return ``rate`` percent of this amount, rounded half-up to minor units."""
        value = Decimal(self.amount_cents) * Decimal(str(rate)) / Decimal(100)
        return Money(int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)), self.currency)

    def clamp(self, low: Money, high: Money) -> Money:
        """Clamp this amount into ``[low, high]``."""
        self._check(low)
        self._check(high)
        if high.amount_cents < low.amount_cents:
            return low
        return Money(max(low.amount_cents, min(self.amount_cents, high.amount_cents)), self.currency)

    @property
    def is_negative(self) -> bool:
        return self.amount_cents < 0

    def __str__(self) -> str:
        return f"{Decimal(self.amount_cents) / 100:.2f} {self.currency}"
