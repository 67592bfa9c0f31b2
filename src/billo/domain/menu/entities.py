from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from billo.domain.common.ids import MenuItemId, RestaurantId
from billo.domain.common.money import Money


class MenuCategory(str, Enum):
    FOOD = "food"
    DRINKS = "drinks"
    APPETIZERS = "appetizers"
    DESSERTS = "desserts"
    SPECIALS = "specials"


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    restaurant_id: RestaurantId
    name: str
    description: str | None
    price: Money
    category: MenuCategory = MenuCategory.FOOD
    is_available: bool = True
    preparation_minutes: int = 0

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.price.amount_cents <= 0:
            raise ValueError("price must be greater than 0")
        if self.preparation_minutes < 0:
            raise ValueError("preparation_minutes must be >= 0")


def sort_menu(items: list[MenuItem]) -> list[MenuItem]:
    return sorted(items, key=lambda item: (item.category.value, item.name.lower(), item.item_id))
