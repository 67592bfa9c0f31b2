from __future__ import annotations

from fastapi import APIRouter, Query, status

from billo.application.dto.requests import CreateRestaurantRequest
from billo.application.dto.responses import RestaurantResponse
from billo.application.use_cases.restaurants import (
    CreateRestaurant,
    GetRestaurant,
    GetRestaurantByOwner,
)
from billo.domain.common.ids import RestaurantId
from billo.infrastructure.db.repositories.staff_repo import SqlAlchemyRestaurantRepository

router = APIRouter()


def _create_restaurant_use_case() -> CreateRestaurant:
    return CreateRestaurant(restaurant_repository=SqlAlchemyRestaurantRepository())


def _get_restaurant_use_case() -> GetRestaurant:
    return GetRestaurant(restaurant_repository=SqlAlchemyRestaurantRepository())


def _get_restaurant_by_owner_use_case() -> GetRestaurantByOwner:
    return GetRestaurantByOwner(restaurant_repository=SqlAlchemyRestaurantRepository())


@router.post(
    "/v1/restaurants",
    response_model=RestaurantResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_restaurant(request_dto: CreateRestaurantRequest) -> RestaurantResponse:
    return _create_restaurant_use_case().execute(request_dto)


@router.get("/v1/restaurants", response_model=RestaurantResponse)
def get_restaurant_by_owner(owner_id: str = Query(alias="ownerId")) -> RestaurantResponse:
    return _get_restaurant_by_owner_use_case().execute(owner_id)


@router.get("/v1/restaurants/{restaurant_id}", response_model=RestaurantResponse)
def get_restaurant(restaurant_id: str) -> RestaurantResponse:
    return _get_restaurant_use_case().execute(RestaurantId(restaurant_id))
