from __future__ import annotations

import logging
from uuid import uuid4

from billo.application.dto.requests import CreateWaiterRequest, WaiterLoginRequest
from billo.application.dto.responses import WaiterListResponse, WaiterResponse
from billo.application.errors import (
    RestaurantNotFoundError,
    StateError,
    ValidationError,
    WaiterNotFoundError,
)
from billo.application.mappers.event_envelope import WAITER_UPDATED, serialize_catalog_event
from billo.application.mappers.staff_mapper import to_waiter_response
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import (
    DuplicateRowError,
    RestaurantRepository,
    WaiterRepository,
)
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.domain.common.ids import RestaurantId, WaiterId
from billo.domain.waiter.entities import Waiter

logger = logging.getLogger(__name__)


def _require_restaurant(
    restaurant_repository: RestaurantRepository,
    restaurant_id: RestaurantId,
) -> None:
    if restaurant_repository.get(restaurant_id) is None:
        raise RestaurantNotFoundError(
            f"restaurant {restaurant_id} not found",
            details={"restaurantId": str(restaurant_id)},
        )


def _publish_waiter_change(
    publisher: EventPublisher,
    waiter: Waiter,
    action: str,
    trace_ctx: TraceContext,
    clock: Clock,
) -> None:
    publish_event(
        publisher,
        restaurant_id=str(waiter.restaurant_id),
        event_type=WAITER_UPDATED,
        message=serialize_catalog_event(
            event_type=WAITER_UPDATED,
            occurred_at=clock(),
            restaurant_id=str(waiter.restaurant_id),
            entity_id=str(waiter.waiter_id),
            action=action,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        ),
    )


def _pin_in_use() -> StateError:
    return StateError(
        "another waiter of this restaurant already uses that PIN",
        code="PIN_IN_USE",
    )


class CreateWaiter:
    def __init__(
        self,
        waiter_repository: WaiterRepository,
        restaurant_repository: RestaurantRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._waiter_repository = waiter_repository
        self._restaurant_repository = restaurant_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        restaurant_id: RestaurantId,
        request_dto: CreateWaiterRequest,
        trace_ctx: TraceContext,
    ) -> WaiterResponse:
        _require_restaurant(self._restaurant_repository, restaurant_id)
        try:
            waiter = Waiter(
                waiter_id=WaiterId(f"wtr_{uuid4().hex[:12]}"),
                restaurant_id=restaurant_id,
                name=request_dto.name.strip(),
                pin=request_dto.pin,
            )
        except ValueError as exc:
            raise ValidationError(str(exc), code="INVALID_WAITER") from exc

        # PINs are unique per restaurant.
        if self._waiter_repository.get_by_pin(restaurant_id, waiter.pin) is not None:
            raise _pin_in_use()
        try:
            self._waiter_repository.add(waiter)
        except DuplicateRowError as exc:
            raise _pin_in_use() from exc
        logger.info("waiter_created", extra={"restaurant_id": str(restaurant_id)})
        _publish_waiter_change(self._publisher, waiter, "created", trace_ctx, self._clock)
        return to_waiter_response(waiter)


class ListWaiters:
    def __init__(
        self,
        waiter_repository: WaiterRepository,
        restaurant_repository: RestaurantRepository,
    ) -> None:
        self._waiter_repository = waiter_repository
        self._restaurant_repository = restaurant_repository

    def execute(self, restaurant_id: RestaurantId) -> WaiterListResponse:
        _require_restaurant(self._restaurant_repository, restaurant_id)
        waiters = self._waiter_repository.list_for_restaurant(restaurant_id)
        return WaiterListResponse(waiters=[to_waiter_response(waiter) for waiter in waiters])


class DeleteWaiter:
    """Remove a waiter. Tabs and orders keep the waiter's id and name."""

    def __init__(
        self,
        waiter_repository: WaiterRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._waiter_repository = waiter_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, waiter_id: WaiterId, trace_ctx: TraceContext) -> None:
        waiter = self._waiter_repository.get(waiter_id)
        if waiter is None or not self._waiter_repository.delete(waiter_id):
            raise WaiterNotFoundError(
                f"waiter {waiter_id} not found",
                details={"waiterId": str(waiter_id)},
            )
        logger.info("waiter_deleted", extra={"restaurant_id": str(waiter.restaurant_id)})
        _publish_waiter_change(self._publisher, waiter, "deleted", trace_ctx, self._clock)


class WaiterLogin:
    """Identify a waiter by restaurant and 4-digit PIN.

    This is a plain equality match on the stored PIN with no attempt
    limiting; it is a convenience switch between staff on a shared device,
    not authentication.
    """

    def __init__(self, waiter_repository: WaiterRepository) -> None:
        self._waiter_repository = waiter_repository

    def execute(self, restaurant_id: RestaurantId, request_dto: WaiterLoginRequest) -> WaiterResponse:
        waiter = self._waiter_repository.get_by_pin(restaurant_id, request_dto.pin.strip())
        if waiter is None:
            raise WaiterNotFoundError("invalid PIN", code="INVALID_PIN")
        logger.info("waiter_login", extra={"restaurant_id": str(restaurant_id)})
        return to_waiter_response(waiter)
