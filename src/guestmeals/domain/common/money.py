from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True)
class Money:
    """Whole currency units (rupees); the kitchen never prices in paise."""

    amount: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("amount must be >= 0")
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValueError("currency must be a 3-letter uppercase code")

    def times(self, quantity: int) -> Money:
        return Money(amount=self.amount * quantity, currency=self.currency)

    def plus(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValueError("cannot add amounts in different currencies")
        return Money(amount=self.amount + other.amount, currency=self.currency)


def zero(currency: str = DEFAULT_CURRENCY) -> Money:
    return Money(amount=0, currency=currency)
