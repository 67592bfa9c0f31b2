from __future__ import annotations

import logging
from dataclasses import replace
from uuid import uuid4

from billo.application.dto.requests import CreateMenuItemRequest, UpdateMenuItemRequest
from billo.application.dto.responses import MenuItemResponse
from billo.application.errors import (
    MenuItemNotFoundError,
    RestaurantNotFoundError,
    ValidationError,
)
from billo.application.mappers.event_envelope import MENU_UPDATED, serialize_catalog_event
from billo.application.mappers.menu_mapper import to_menu_item_response
from billo.application.ports.cache import CacheStore
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import MenuRepository, RestaurantRepository
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.get_menu import invalidate_menu_cache
from billo.application.use_cases.publishing import publish_event
from billo.domain.common.ids import MenuItemId, RestaurantId
from billo.domain.common.money import Money
from billo.domain.menu.entities import MenuCategory, MenuItem

logger = logging.getLogger(__name__)


def parse_category(value: str) -> MenuCategory:
    try:
        return MenuCategory(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(category.value for category in MenuCategory)
        raise ValidationError(
            f"unknown menu category {value!r}; expected one of: {allowed}",
            code="INVALID_CATEGORY",
        ) from exc


class _MenuWriter:
    def __init__(
        self,
        menu_repository: MenuRepository,
        cache: CacheStore | None,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._menu_repository = menu_repository
        self._cache = cache
        self._publisher = publisher
        self._clock = clock

    def _changed(
        self,
        restaurant_id: RestaurantId,
        item_id: MenuItemId,
        action: str,
        trace_ctx: TraceContext,
    ) -> None:
        invalidate_menu_cache(self._cache, restaurant_id)
        logger.info(
            "menu_item_" + action,
            extra={"restaurant_id": str(restaurant_id)},
        )
        publish_event(
            self._publisher,
            restaurant_id=str(restaurant_id),
            event_type=MENU_UPDATED,
            message=serialize_catalog_event(
                event_type=MENU_UPDATED,
                occurred_at=self._clock(),
                restaurant_id=str(restaurant_id),
                entity_id=str(item_id),
                action=action,
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )

    def _load(self, item_id: MenuItemId) -> MenuItem:
        item = self._menu_repository.get(item_id)
        if item is None:
            raise MenuItemNotFoundError(
                f"menu item {item_id} not found",
                details={"menuItemId": str(item_id)},
            )
        return item


class CreateMenuItem(_MenuWriter):
    def __init__(
        self,
        menu_repository: MenuRepository,
        restaurant_repository: RestaurantRepository,
        cache: CacheStore | None,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(menu_repository, cache, publisher, clock)
        self._restaurant_repository = restaurant_repository

    def execute(
        self,
        restaurant_id: RestaurantId,
        request_dto: CreateMenuItemRequest,
        trace_ctx: TraceContext,
    ) -> MenuItemResponse:
        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(
                f"restaurant {restaurant_id} not found",
                details={"restaurantId": str(restaurant_id)},
            )
        try:
            item = MenuItem(
                item_id=MenuItemId(f"itm_{uuid4().hex[:12]}"),
                restaurant_id=restaurant_id,
                name=request_dto.name.strip(),
                description=request_dto.description,
                price=Money.from_decimal(request_dto.price, restaurant.currency),
                category=parse_category(request_dto.category),
                is_available=request_dto.is_available,
                preparation_minutes=request_dto.preparation_minutes,
            )
        except ValueError as exc:
            raise ValidationError(str(exc), code="INVALID_MENU_ITEM") from exc

        self._menu_repository.add(item)
        self._changed(restaurant_id, item.item_id, "created", trace_ctx)
        return to_menu_item_response(item)


class UpdateMenuItem(_MenuWriter):
    def execute(
        self,
        item_id: MenuItemId,
        request_dto: UpdateMenuItemRequest,
        trace_ctx: TraceContext,
    ) -> MenuItemResponse:
        current = self._load(item_id)
        changes = request_dto.model_dump(exclude_unset=True)
        try:
            updated = replace(
                current,
                name=changes["name"].strip() if changes.get("name") is not None else current.name,
                description=changes.get("description", current.description),
                price=(
                    Money.from_decimal(changes["price"], current.price.currency)
                    if changes.get("price") is not None
                    else current.price
                ),
                category=(
                    parse_category(changes["category"])
                    if changes.get("category") is not None
                    else current.category
                ),
                is_available=(
                    changes["is_available"]
                    if changes.get("is_available") is not None
                    else current.is_available
                ),
                preparation_minutes=(
                    changes["preparation_minutes"]
                    if changes.get("preparation_minutes") is not None
                    else current.preparation_minutes
                ),
            )
        except ValueError as exc:
            raise ValidationError(str(exc), code="INVALID_MENU_ITEM") from exc

        self._menu_repository.update(updated)
        self._changed(updated.restaurant_id, item_id, "updated", trace_ctx)
        return to_menu_item_response(updated)


class DeleteMenuItem(_MenuWriter):
    """Delete a menu item; past orders keep their own copy of name and price."""

    def execute(self, item_id: MenuItemId, trace_ctx: TraceContext) -> None:
        item = self._load(item_id)
        if not self._menu_repository.delete(item_id):
            raise MenuItemNotFoundError(
                f"menu item {item_id} not found",
                details={"menuItemId": str(item_id)},
            )
        self._changed(item.restaurant_id, item_id, "deleted", trace_ctx)
