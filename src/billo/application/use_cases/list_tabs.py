from __future__ import annotations

from billo.application.dto.responses import TabListResponse
from billo.application.errors import RestaurantNotFoundError, ValidationError
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.ports.repositories import (
    InvalidCursorError,
    RestaurantRepository,
    TabRepository,
)
from billo.domain.common.ids import RestaurantId
from billo.domain.tab.transitions import OPEN_STATUSES, TabStatus


def resolve_status_filter(status: str) -> frozenset[TabStatus] | None:
    normalized = status.strip().upper()
    if normalized == "ALL":
        return None
    if normalized == "OPEN":
        return OPEN_STATUSES
    try:
        return frozenset({TabStatus(normalized.lower())})
    except ValueError as exc:
        raise ValidationError(
            f"invalid tab status filter: {status}",
            code="INVALID_TAB_STATUS",
        ) from exc


class ListTabs:
    def __init__(
        self,
        tab_repository: TabRepository,
        restaurant_repository: RestaurantRepository,
    ) -> None:
        self._tab_repository = tab_repository
        self._restaurant_repository = restaurant_repository

    def execute(
        self,
        restaurant_id: RestaurantId,
        *,
        status: str = "ALL",
        limit: int = 50,
        cursor: str | None = None,
    ) -> TabListResponse:
        statuses = resolve_status_filter(status)
        if limit < 1 or limit > 200:
            raise ValidationError("limit must be between 1 and 200", code="INVALID_LIMIT")

        if self._restaurant_repository.get(restaurant_id) is None:
            raise RestaurantNotFoundError(
                f"restaurant {restaurant_id} not found",
                details={"restaurantId": str(restaurant_id)},
            )

        try:
            tabs, next_cursor = self._tab_repository.list_for_restaurant(
                restaurant_id=restaurant_id,
                statuses=statuses,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise ValidationError("invalid cursor", code="INVALID_CURSOR") from exc

        return TabListResponse(
            tabs=[to_tab_response(tab) for tab in tabs],
            nextCursor=next_cursor,
        )
