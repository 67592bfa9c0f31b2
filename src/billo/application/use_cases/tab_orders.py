from __future__ import annotations

from billo.application.dto.responses import OrderResponse, TabOrdersResponse
from billo.application.errors import TabNotFoundError, ValidationError
from billo.application.mappers.order_mapper import to_order_response
from billo.application.ports.repositories import InvalidCursorError, OrderRepository, TabRepository
from billo.application.use_cases.order_status import parse_order_status
from billo.domain.common.ids import TabId


class TabOrders:
    """Paged order history of one tab, newest first."""

    def __init__(
        self,
        order_repository: OrderRepository,
        tab_repository: TabRepository,
    ) -> None:
        self._order_repository = order_repository
        self._tab_repository = tab_repository

    def execute(
        self,
        tab_id: TabId,
        *,
        status: str = "ALL",
        limit: int = 50,
        cursor: str | None = None,
    ) -> TabOrdersResponse:
        if self._tab_repository.get(tab_id) is None:
            raise TabNotFoundError(f"tab {tab_id} not found", details={"tabId": str(tab_id)})

        order_status = None if status.strip().upper() == "ALL" else parse_order_status(status)
        if limit < 1 or limit > 200:
            raise ValidationError("limit must be between 1 and 200", code="INVALID_LIMIT")

        try:
            orders, next_cursor = self._order_repository.page_for_tab(
                tab_id=tab_id,
                status=order_status,
                limit=limit,
                cursor=cursor,
            )
        except InvalidCursorError as exc:
            raise ValidationError("invalid cursor", code="INVALID_CURSOR") from exc

        return TabOrdersResponse(
            orders=[to_order_response(order) for order in orders],
            nextCursor=next_cursor,
        )


class ListTabOrders:
    """Every order of a tab, oldest first, for live views."""

    def __init__(self, order_repository: OrderRepository) -> None:
        self._order_repository = order_repository

    def execute(self, tab_id: TabId) -> list[OrderResponse]:
        return [to_order_response(order) for order in self._order_repository.list_for_tab(tab_id)]
