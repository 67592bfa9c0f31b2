from __future__ import annotations

import logging

from billo.application.dto.requests import ActivateTabRequest, UpdateTabStatusRequest
from billo.application.dto.responses import TabResponse
from billo.application.errors import ValidationError, WaiterNotFoundError
from billo.application.mappers.event_envelope import (
    TAB_ACTIVATED,
    TAB_DELETED,
    TAB_STATUS_CHANGED,
    serialize_tab_event,
)
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.metrics.tab_lifecycle import record_tab_transition
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import TabRepository, WaiterRepository
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.application.use_cases.translate import domain_errors
from billo.domain.common.ids import TabId, WaiterId
from billo.domain.tab.entities import Tab, TabStateError
from billo.domain.tab.events import TabActivated, TabDeleted, TabStatusChanged
from billo.domain.tab.transitions import TabStatus

logger = logging.getLogger(__name__)


def parse_tab_status(value: str) -> TabStatus:
    try:
        return TabStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(status.value for status in TabStatus)
        raise ValidationError(
            f"unknown tab status {value!r}; expected one of: {allowed}",
            code="INVALID_TAB_STATUS",
        ) from exc


class ActivateTab:
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
        tab_id: TabId,
        request_dto: ActivateTabRequest,
        trace_ctx: TraceContext,
    ) -> TabResponse:
        waiter = self._waiter_repository.get(WaiterId(request_dto.waiter_id))
        if waiter is None:
            raise WaiterNotFoundError(
                f"waiter {request_dto.waiter_id} not found",
                details={"waiterId": request_dto.waiter_id},
            )
        now = self._clock()

        def decide(tab: Tab) -> Tab:
            if not waiter.works_at(tab.restaurant_id):
                raise WaiterNotFoundError(
                    f"waiter {waiter.waiter_id} does not work at restaurant {tab.restaurant_id}",
                    details={"waiterId": str(waiter.waiter_id)},
                )
            return tab.activate(waiter.waiter_id, waiter.name, now)

        with domain_errors():
            before, tab = self._tab_repository.mutate(tab_id, decide)

        record_tab_transition(before.status, tab.status)
        logger.info(
            "tab_activated",
            extra={"tab_id": str(tab_id), "restaurant_id": str(tab.restaurant_id)},
        )
        publish_event(
            self._publisher,
            restaurant_id=str(tab.restaurant_id),
            event_type=TAB_ACTIVATED,
            message=serialize_tab_event(
                TabActivated(tab=tab, occurred_at=now),
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )
        return to_tab_response(tab)


class UpdateTabStatus:
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
        tab_id: TabId,
        request_dto: UpdateTabStatusRequest,
        trace_ctx: TraceContext,
    ) -> TabResponse:
        target = parse_tab_status(request_dto.status)
        now = self._clock()

        with domain_errors():
            before, tab = self._tab_repository.mutate(
                tab_id,
                lambda current: current.transition_to(target, now),
            )

        record_tab_transition(before.status, tab.status)
        logger.info(
            "tab_status_changed",
            extra={"tab_id": str(tab_id), "restaurant_id": str(tab.restaurant_id)},
        )
        publish_event(
            self._publisher,
            restaurant_id=str(tab.restaurant_id),
            event_type=TAB_STATUS_CHANGED,
            message=serialize_tab_event(
                TabStatusChanged(tab=tab, from_status=before.status, occurred_at=now),
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )
        return to_tab_response(tab)


class DeleteTab:
    """Remove a tab that never received an order."""

    def __init__(
        self,
        tab_repository: TabRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, tab_id: TabId, trace_ctx: TraceContext) -> None:
        def check(tab: Tab, stored_orders: int) -> None:
            tab.ensure_deletable()
            if stored_orders > 0:
                raise TabStateError(
                    f"cannot delete tab {tab.tab_id}: {stored_orders} orders reference it",
                    reason="TAB_HAS_ORDERS",
                )

        with domain_errors():
            tab = self._tab_repository.delete(tab_id, check)

        logger.info(
            "tab_deleted",
            extra={"tab_id": str(tab_id), "restaurant_id": str(tab.restaurant_id)},
        )
        publish_event(
            self._publisher,
            restaurant_id=str(tab.restaurant_id),
            event_type=TAB_DELETED,
            message=serialize_tab_event(
                TabDeleted(tab=tab, occurred_at=self._clock()),
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )
