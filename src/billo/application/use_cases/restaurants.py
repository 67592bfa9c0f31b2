from __future__ import annotations

import logging
from uuid import uuid4

from billo.application.dto.requests import CreateRestaurantRequest
from billo.application.dto.responses import RestaurantResponse
from billo.application.errors import RestaurantNotFoundError, ValidationError
from billo.application.mappers.staff_mapper import to_restaurant_response
from billo.application.ports.repositories import RestaurantRepository
from billo.domain.common.ids import RestaurantId
from billo.domain.restaurant.entities import Restaurant

logger = logging.getLogger(__name__)


class CreateRestaurant:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, request_dto: CreateRestaurantRequest) -> RestaurantResponse:
        if not request_dto.owner_id.strip():
            raise ValidationError("ownerId is required", code="INVALID_RESTAURANT")
        try:
            restaurant = Restaurant(
                restaurant_id=RestaurantId(f"rst_{uuid4().hex[:12]}"),
                owner_id=request_dto.owner_id.strip(),
                name=request_dto.name.strip(),
                currency=request_dto.currency.strip().upper(),
                timezone=request_dto.timezone.strip(),
            )
        except ValueError as exc:
            raise ValidationError(str(exc), code="INVALID_RESTAURANT") from exc

        self._restaurant_repository.add(restaurant)
        logger.info(
            "restaurant_created",
            extra={"restaurant_id": str(restaurant.restaurant_id)},
        )
        return to_restaurant_response(restaurant)


class GetRestaurant:
    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, restaurant_id: RestaurantId) -> RestaurantResponse:
        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(
                f"restaurant {restaurant_id} not found",
                details={"restaurantId": str(restaurant_id)},
            )
        return to_restaurant_response(restaurant)


class GetRestaurantByOwner:
    """The restaurant an owner's dashboard opens; the earliest one if several."""

    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        self._restaurant_repository = restaurant_repository

    def execute(self, owner_id: str) -> RestaurantResponse:
        owner_id = owner_id.strip()
        if not owner_id:
            raise ValidationError("ownerId is required", code="INVALID_OWNER")
        restaurant = self._restaurant_repository.get_by_owner(owner_id)
        if restaurant is None:
            raise RestaurantNotFoundError(
                f"owner {owner_id} has no restaurant",
                details={"ownerId": owner_id},
            )
        return to_restaurant_response(restaurant)
