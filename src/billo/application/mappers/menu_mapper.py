from __future__ import annotations

from billo.application.dto.responses import MenuItemResponse, MenuResponse
from billo.application.mappers.money_mapper import to_money_response
from billo.domain.common.ids import RestaurantId
from billo.domain.menu.entities import MenuItem, sort_menu


def to_menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        itemId=str(item.item_id),
        restaurantId=str(item.restaurant_id),
        name=item.name,
        description=item.description,
        price=to_money_response(item.price),
        category=item.category.value,
        isAvailable=item.is_available,
        preparationMinutes=item.preparation_minutes,
    )


def to_menu_response(restaurant_id: RestaurantId, items: list[MenuItem]) -> MenuResponse:
    ordered = sort_menu(items)
    categories: list[str] = []
    for item in ordered:
        if item.category.value not in categories:
            categories.append(item.category.value)
    return MenuResponse(
        restaurantId=str(restaurant_id),
        categories=categories,
        items=[to_menu_item_response(item) for item in ordered],
    )
