from __future__ import annotations

from billo.application.dto.responses import RestaurantResponse, WaiterResponse
from billo.domain.restaurant.entities import Restaurant
from billo.domain.waiter.entities import Waiter


def to_restaurant_response(restaurant: Restaurant) -> RestaurantResponse:
    return RestaurantResponse(
        restaurantId=str(restaurant.restaurant_id),
        ownerId=restaurant.owner_id,
        name=restaurant.name,
        currency=restaurant.currency,
        timezone=restaurant.timezone,
        dailyTabCounter=restaurant.daily_tab_counter,
        lastTabReset=restaurant.last_tab_reset,
    )


def to_waiter_response(waiter: Waiter) -> WaiterResponse:
    return WaiterResponse(
        waiterId=str(waiter.waiter_id),
        restaurantId=str(waiter.restaurant_id),
        name=waiter.name,
    )
