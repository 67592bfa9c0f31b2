from __future__ import annotations

from fastapi import APIRouter, Query, status

from billo.api.tracing import current_trace_context
from billo.application.dto.requests import AppendOrderRequest, UpdateOrderStatusRequest
from billo.application.dto.responses import (
    AppendOrderResponse,
    OrderResponse,
    OrderStatusResponse,
    TabOrdersResponse,
)
from billo.application.use_cases.append_order import AppendOrder
from billo.application.use_cases.get_order import GetOrder
from billo.application.use_cases.order_status import UpdateOrderStatus
from billo.application.use_cases.tab_orders import TabOrders
from billo.domain.common.ids import OrderId, TabId
from billo.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from billo.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from billo.infrastructure.db.repositories.staff_repo import SqlAlchemyWaiterRepository
from billo.infrastructure.db.repositories.tab_repo import SqlAlchemyTabRepository
from billo.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _append_order_use_case() -> AppendOrder:
    return AppendOrder(
        tab_repository=SqlAlchemyTabRepository(),
        menu_repository=SqlAlchemyMenuRepository(),
        waiter_repository=SqlAlchemyWaiterRepository(),
        publisher=RedisEventPublisher(),
    )


def _tab_orders_use_case() -> TabOrders:
    return TabOrders(
        order_repository=SqlAlchemyOrderRepository(),
        tab_repository=SqlAlchemyTabRepository(),
    )


def _get_order_use_case() -> GetOrder:
    return GetOrder(order_repository=SqlAlchemyOrderRepository())


def _update_order_status_use_case() -> UpdateOrderStatus:
    return UpdateOrderStatus(
        tab_repository=SqlAlchemyTabRepository(),
        publisher=RedisEventPublisher(),
    )


@router.post(
    "/v1/tabs/{tab_id}/orders",
    response_model=AppendOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
def append_order(tab_id: str, request_dto: AppendOrderRequest) -> AppendOrderResponse:
    return _append_order_use_case().execute(
        tab_id=TabId(tab_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/tabs/{tab_id}/orders", response_model=TabOrdersResponse)
def list_tab_orders(
    tab_id: str,
    status_filter: str = Query(default="ALL", alias="status"),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> TabOrdersResponse:
    return _tab_orders_use_case().execute(
        TabId(tab_id),
        status=status_filter,
        limit=limit,
        cursor=cursor,
    )


@router.get("/v1/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    return _get_order_use_case().execute(order_id=OrderId(order_id))


@router.post("/v1/orders/{order_id}/status", response_model=OrderStatusResponse)
def update_order_status(order_id: str, request_dto: UpdateOrderStatusRequest) -> OrderStatusResponse:
    return _update_order_status_use_case().execute(
        order_id=OrderId(order_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )
