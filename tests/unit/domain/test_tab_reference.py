from __future__ import annotations

import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from billo.domain.common.ids import RestaurantId
from billo.domain.restaurant.entities import Restaurant
from billo.domain.tab.reference import DailyTabCounter


def test_first_allocation_starts_at_one() -> None:
    counter = DailyTabCounter(value=0, last_reset=None).next(date(2026, 10, 19))
    assert counter.value == 1
    assert counter.reference == "1"
    assert counter.last_reset == date(2026, 10, 19)


def test_allocations_on_the_same_day_increment() -> None:
    today = date(2026, 10, 19)
    counter = DailyTabCounter(value=0, last_reset=None)
    references = []
    for _ in range(5):
        counter = counter.next(today)
        references.append(counter.reference)
    assert references == ["1", "2", "3", "4", "5"]


def test_counter_resets_on_a_new_day() -> None:
    counter = DailyTabCounter(value=41, last_reset=date(2026, 10, 18))
    assert counter.next(date(2026, 10, 19)) == DailyTabCounter(value=1, last_reset=date(2026, 10, 19))


def test_negative_counter_is_invalid() -> None:
    with pytest.raises(ValueError):
        DailyTabCounter(value=-1, last_reset=None)


def test_restaurant_allocates_in_its_local_day() -> None:
    restaurant = Restaurant(
        restaurant_id=RestaurantId("rst_1"),
        owner_id="own_1",
        name="Late Night Diner",
        timezone="America/New_York",
        daily_tab_counter=7,
        last_tab_reset=date(2026, 10, 18),
    )
    # 02:00 UTC on the 19th is still the 18th in New York.
    updated, counter = restaurant.allocate_tab_reference(
        datetime(2026, 10, 19, 2, 0, tzinfo=timezone.utc)
    )
    assert counter.reference == "8"
    assert updated.daily_tab_counter == 8
    assert updated.last_tab_reset == date(2026, 10, 18)

    _, next_day = updated.allocate_tab_reference(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    assert next_day.reference == "1"
    assert next_day.last_reset == date(2026, 10, 19)


def test_restaurant_rejects_unknown_timezone() -> None:
    with pytest.raises(ValueError, match="unknown timezone"):
        Restaurant(
            restaurant_id=RestaurantId("rst_1"),
            owner_id="own_1",
            name="Nowhere",
            timezone="Mars/Olympus_Mons",
        )
