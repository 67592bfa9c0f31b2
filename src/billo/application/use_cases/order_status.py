from __future__ import annotations

import logging

from billo.application.dto.requests import UpdateOrderStatusRequest
from billo.application.dto.responses import OrderStatusResponse
from billo.application.errors import ValidationError
from billo.application.mappers.event_envelope import ORDER_STATUS_CHANGED, serialize_order_event
from billo.application.mappers.order_mapper import to_order_response
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.metrics.tab_lifecycle import record_order_transition
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import TabRepository
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.application.use_cases.translate import domain_errors
from billo.domain.common.ids import OrderId
from billo.domain.order.entities import Order, OrderStatus
from billo.domain.order.events import OrderStatusChanged
from billo.domain.tab.entities import Tab

logger = logging.getLogger(__name__)


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        raise ValidationError(
            f"unknown order status {value!r}",
            code="INVALID_ORDER_STATUS",
        ) from exc


class UpdateOrderStatus:
    def __init__(
        self,
        tab_repository: TabRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        order_id: OrderId,
        request_dto: UpdateOrderStatusRequest,
        trace_ctx: TraceContext,
    ) -> OrderStatusResponse:
        target = parse_order_status(request_dto.status)
        now = self._clock()

        def decide(tab: Tab, order: Order) -> tuple[Tab, Order]:
            updated_order = order.transition_to(target, now)
            if target == OrderStatus.CANCELLED:
                # Cancelled orders stay on the tab but stop counting toward it.
                tab = tab.withdraw_order(order, now)
            return tab, updated_order

        with domain_errors():
            tab, previous, order = self._tab_repository.update_order_status(order_id, decide)

        record_order_transition(previous.status, order.status)
        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(order_id),
                "tab_id": str(order.tab_id),
                "restaurant_id": str(order.restaurant_id),
            },
        )
        publish_event(
            self._publisher,
            restaurant_id=str(order.restaurant_id),
            event_type=ORDER_STATUS_CHANGED,
            message=serialize_order_event(
                OrderStatusChanged(
                    order=order,
                    tab=tab,
                    from_status=previous.status,
                    occurred_at=now,
                ),
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )
        return OrderStatusResponse(order=to_order_response(order), tab=to_tab_response(tab))
