from __future__ import annotations

import logging
from uuid import uuid4

from billo.application.dto.requests import CreateTabRequest
from billo.application.dto.responses import TabResponse
from billo.application.errors import ValidationError, WaiterNotFoundError
from billo.application.mappers.event_envelope import TAB_CREATED, serialize_tab_event
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.metrics.tab_lifecycle import record_tab_created
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import TabRepository, WaiterRepository
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.application.use_cases.translate import domain_errors
from billo.domain.common.ids import RestaurantId, TabId, WaiterId
from billo.domain.restaurant.entities import Restaurant
from billo.domain.tab.entities import Tab, open_tab
from billo.domain.tab.events import TabCreated
from billo.domain.waiter.entities import Waiter

logger = logging.getLogger(__name__)


class CreateTab:
    """Open a tab under the next daily reference number of a restaurant.

    Customers (QR scan) get an inactive tab with no waiter; a waiter opening a
    tab gets it active and assigned to them straight away.
    """

    def __init__(
        self,
        tab_repository: TabRepository,
        waiter_repository: WaiterRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._waiter_repository = waiter_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        restaurant_id: RestaurantId,
        request_dto: CreateTabRequest,
        trace_ctx: TraceContext,
    ) -> TabResponse:
        waiter = self._resolve_waiter(restaurant_id, request_dto)
        now = self._clock()
        tab_id = TabId(f"tab_{uuid4().hex[:12]}")

        def build(restaurant: Restaurant) -> tuple[Restaurant, Tab]:
            updated, counter = restaurant.allocate_tab_reference(now)
            tab = open_tab(
                tab_id=tab_id,
                restaurant_id=restaurant.restaurant_id,
                reference_number=counter.reference,
                reference_date=updated.local_date(now),
                currency=restaurant.currency,
                now=now,
                waiter_id=waiter.waiter_id if waiter else None,
                waiter_name=waiter.name if waiter else None,
                customer_name=request_dto.customer_name,
                table_number=request_dto.table_number,
            )
            return updated, tab

        with domain_errors():
            tab = self._tab_repository.create(restaurant_id, build)

        record_tab_created(restaurant_id=str(restaurant_id), initiator=request_dto.initiator)
        logger.info(
            "tab_created",
            extra={"tab_id": str(tab.tab_id), "restaurant_id": str(restaurant_id)},
        )
        message = serialize_tab_event(
            TabCreated(tab=tab, initiator=request_dto.initiator, occurred_at=now),
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_event(
            self._publisher,
            restaurant_id=str(restaurant_id),
            event_type=TAB_CREATED,
            message=message,
        )
        return to_tab_response(tab)

    def _resolve_waiter(
        self,
        restaurant_id: RestaurantId,
        request_dto: CreateTabRequest,
    ) -> Waiter | None:
        if request_dto.initiator == "customer":
            if request_dto.waiter_id:
                raise ValidationError(
                    "customer-opened tabs start without a waiter; activate the tab instead",
                    code="UNEXPECTED_WAITER",
                )
            return None

        if not request_dto.waiter_id:
            raise ValidationError(
                "waiterId is required when a waiter opens a tab",
                code="WAITER_REQUIRED",
            )
        waiter = self._waiter_repository.get(WaiterId(request_dto.waiter_id))
        if waiter is None or not waiter.works_at(restaurant_id):
            raise WaiterNotFoundError(
                f"waiter {request_dto.waiter_id} not found for restaurant {restaurant_id}",
                details={"waiterId": request_dto.waiter_id},
            )
        return waiter
