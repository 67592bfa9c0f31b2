from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyTabCounter:
    """Per-restaurant tab reference counter that restarts every local day."""

    value: int
    last_reset: date | None

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("counter value must be >= 0")

    def next(self, today: date) -> DailyTabCounter:
        # Reset check and increment are decided together from one read.
        if self.last_reset is None or self.last_reset != today:
            return DailyTabCounter(value=1, last_reset=today)
        return DailyTabCounter(value=self.value + 1, last_reset=today)

    @property
    def reference(self) -> str:
        return str(self.value)
