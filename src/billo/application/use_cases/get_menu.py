from __future__ import annotations

import logging

from pydantic import ValidationError as PayloadValidationError

from billo.application.dto.responses import MenuResponse
from billo.application.errors import RestaurantNotFoundError
from billo.application.mappers.menu_mapper import to_menu_response
from billo.application.ports.cache import CacheStore
from billo.application.ports.repositories import MenuRepository, RestaurantRepository
from billo.domain.common.ids import RestaurantId

logger = logging.getLogger(__name__)


def menu_cache_key(restaurant_id: RestaurantId) -> str:
    return f"menu:{restaurant_id}"


def invalidate_menu_cache(cache: CacheStore | None, restaurant_id: RestaurantId) -> None:
    if cache is None:
        return
    try:
        cache.delete(menu_cache_key(restaurant_id))
    except Exception:
        logger.warning(
            "menu_cache_invalidation_failed",
            extra={"restaurant_id": str(restaurant_id)},
            exc_info=True,
        )


class GetMenu:
    """Read a restaurant's menu, through the cache when one is given.

    Cache failures are logged and the store is read instead.
    """

    def __init__(
        self,
        repository: MenuRepository,
        restaurant_repository: RestaurantRepository,
        cache: CacheStore | None = None,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._restaurant_repository = restaurant_repository
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception:
            logger.warning("menu_cache_unavailable", exc_info=True)
            return None

    def _cache_set(self, key: str, value: str) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.warning("menu_cache_unavailable", exc_info=True)

    def execute(self, restaurant_id: RestaurantId) -> MenuResponse:
        key = menu_cache_key(restaurant_id)
        payload = self._cache_get(key)
        if payload:
            try:
                return MenuResponse.model_validate_json(payload)
            except PayloadValidationError:
                logger.warning("menu_cache_corrupt", extra={"restaurant_id": str(restaurant_id)})

        if self._restaurant_repository.get(restaurant_id) is None:
            raise RestaurantNotFoundError(
                f"restaurant {restaurant_id} not found",
                details={"restaurantId": str(restaurant_id)},
            )

        response = to_menu_response(restaurant_id, self._repository.list_for_restaurant(restaurant_id))
        self._cache_set(key, response.model_dump_json())
        return response
