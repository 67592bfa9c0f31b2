from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from billo.domain.common.ids import RestaurantId
from billo.domain.tab.reference import DailyTabCounter


@dataclass(frozen=True)
class Restaurant:
    restaurant_id: RestaurantId
    owner_id: str
    name: str
    currency: str = "USD"
    timezone: str = "UTC"
    daily_tab_counter: int = 0
    last_tab_reset: date | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("restaurant name must be non-empty")
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValueError("currency must be a 3-letter uppercase code")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {self.timezone}") from exc

    def local_date(self, now: datetime) -> date:
        """Calendar day of ``now`` in the restaurant's timezone."""
        return now.astimezone(ZoneInfo(self.timezone)).date()

    def allocate_tab_reference(self, now: datetime) -> tuple[Restaurant, DailyTabCounter]:
        counter = DailyTabCounter(value=self.daily_tab_counter, last_reset=self.last_tab_reset)
        allocated = counter.next(self.local_date(now))
        updated = replace(
            self,
            daily_tab_counter=allocated.value,
            last_tab_reset=allocated.last_reset,
        )
        return updated, allocated
