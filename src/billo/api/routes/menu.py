from __future__ import annotations

import hashlib
import os

from fastapi import APIRouter, Header, Response, status

from billo.api.tracing import current_trace_context
from billo.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from billo.application.dto.responses import MenuItemResponse, MenuResponse
from billo.application.use_cases.get_menu import GetMenu
from billo.application.use_cases.manage_menu import CreateMenuItem, DeleteMenuItem, UpdateMenuItem
from billo.domain.common.ids import MenuItemId, RestaurantId
from billo.infrastructure.cache.cache_store import RedisCacheStore
from billo.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from billo.infrastructure.db.repositories.staff_repo import SqlAlchemyRestaurantRepository
from billo.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _menu_cache_ttl_seconds() -> int:
    return int(os.getenv("MENU_CACHE_TTL_SECONDS", "300"))


def _get_menu_use_case() -> GetMenu:
    return GetMenu(
        repository=SqlAlchemyMenuRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
        cache=RedisCacheStore(),
        ttl_seconds=_menu_cache_ttl_seconds(),
    )


def _create_menu_item_use_case() -> CreateMenuItem:
    return CreateMenuItem(
        menu_repository=SqlAlchemyMenuRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
        cache=RedisCacheStore(),
        publisher=RedisEventPublisher(),
    )


def _update_menu_item_use_case() -> UpdateMenuItem:
    return UpdateMenuItem(
        menu_repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        publisher=RedisEventPublisher(),
    )


def _delete_menu_item_use_case() -> DeleteMenuItem:
    return DeleteMenuItem(
        menu_repository=SqlAlchemyMenuRepository(),
        cache=RedisCacheStore(),
        publisher=RedisEventPublisher(),
    )


def _menu_etag(payload: MenuResponse) -> str:
    digest = hashlib.sha256(payload.model_dump_json().encode("utf-8")).hexdigest()
    return f'"menu-{digest[:16]}"'


@router.get("/v1/restaurants/{restaurant_id}/menu", response_model=MenuResponse)
def get_menu(
    restaurant_id: str,
    response: Response,
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = _get_menu_use_case().execute(RestaurantId(restaurant_id))

    etag = _menu_etag(payload)
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload


@router.post(
    "/v1/restaurants/{restaurant_id}/menu/items",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_menu_item(restaurant_id: str, request_dto: CreateMenuItemRequest) -> MenuItemResponse:
    return _create_menu_item_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.patch("/v1/menu-items/{item_id}", response_model=MenuItemResponse)
def update_menu_item(item_id: str, request_dto: UpdateMenuItemRequest) -> MenuItemResponse:
    return _update_menu_item_use_case().execute(
        item_id=MenuItemId(item_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.delete("/v1/menu-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(item_id: str) -> Response:
    _delete_menu_item_use_case().execute(MenuItemId(item_id), trace_ctx=current_trace_context())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
