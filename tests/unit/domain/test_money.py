from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from billo.domain.common.money import Money


def test_from_decimal_rounds_half_up_to_cents() -> None:
    assert Money.from_decimal(Decimal("12.345"), "USD").amount_cents == 1235
    assert Money.from_decimal("0.1", "USD").amount_cents == 10
    assert Money.from_decimal(3, "EUR") == Money(amount_cents=300, currency="EUR")


def test_cent_arithmetic_is_exact() -> None:
    total = Money.zero("USD")
    for _ in range(3):
        total = total + Money.from_decimal("0.10", "USD")
    assert total == Money(amount_cents=30, currency="USD")
    assert total.to_decimal() == Decimal("0.30")


def test_times_and_subtraction() -> None:
    price = Money(amount_cents=250, currency="USD")
    assert price.times(4).amount_cents == 1000
    assert (price.times(4) - price).amount_cents == 750


def test_mixed_currencies_are_rejected() -> None:
    with pytest.raises(ValueError, match="currency mismatch"):
        Money(amount_cents=100, currency="USD") + Money(amount_cents=100, currency="EUR")


@pytest.mark.parametrize("currency", ["usd", "US", "EURO", "12X"])
def test_currency_code_is_validated(currency: str) -> None:
    with pytest.raises(ValueError):
        Money(amount_cents=1, currency=currency)


def test_negative_amounts_and_garbage_input_are_rejected() -> None:
    with pytest.raises(ValueError):
        Money(amount_cents=-1, currency="USD")
    with pytest.raises(ValueError):
        Money.from_decimal("twelve", "USD")
    with pytest.raises(ValueError):
        Money(amount_cents=100, currency="USD") - Money(amount_cents=101, currency="USD")
