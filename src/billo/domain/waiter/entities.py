from __future__ import annotations

import re
from dataclasses import dataclass

from billo.domain.common.ids import RestaurantId, WaiterId

_PIN_PATTERN = re.compile(r"[0-9]{4}")


@dataclass(frozen=True)
class Waiter:
    waiter_id: WaiterId
    restaurant_id: RestaurantId
    name: str
    # Plaintext 4-digit convenience code, not a credential.
    pin: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("waiter name is required")
        if not _PIN_PATTERN.fullmatch(self.pin):
            raise ValueError("a 4-digit PIN is required")

    def works_at(self, restaurant_id: RestaurantId) -> bool:
        return self.restaurant_id == restaurant_id
