from __future__ import annotations

import logging

from billo.application.dto.responses import ReconcileTabResponse
from billo.application.errors import StateError
from billo.application.mappers.event_envelope import TAB_RECONCILED, serialize_tab_event
from billo.application.mappers.tab_mapper import to_aggregates_response, to_tab_response
from billo.application.metrics.tab_lifecycle import record_reconcile_drift
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import TabRepository
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.application.use_cases.translate import domain_errors
from billo.domain.common.ids import TabId
from billo.domain.order.entities import Order
from billo.domain.tab.aggregates import compute_aggregates
from billo.domain.tab.entities import Tab
from billo.domain.tab.events import TabReconciled

logger = logging.getLogger(__name__)


class ReconcileTab:
    """Recompute a tab's cached aggregates from its order history.

    Runs with the tab row locked, so it serializes with concurrent appends.
    A tab whose aggregates already match is left untouched, which makes the
    operation idempotent.
    """

    def __init__(
        self,
        tab_repository: TabRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, tab_id: TabId, trace_ctx: TraceContext) -> ReconcileTabResponse:
        now = self._clock()

        def decide(tab: Tab, orders: list[Order]) -> Tab:
            try:
                aggregates = compute_aggregates(orders, tab.currency)
            except ValueError as exc:
                raise StateError(str(exc), code="CURRENCY_MISMATCH") from exc
            if aggregates == tab.aggregates():
                return tab
            return tab.with_aggregates(aggregates, now)

        with domain_errors():
            before, tab = self._tab_repository.reconcile(tab_id, decide)

        previous = before.aggregates()
        event = TabReconciled(tab=tab, previous=previous, occurred_at=now)
        if event.drifted:
            record_reconcile_drift(str(tab.restaurant_id))
            logger.warning(
                "tab_aggregates_drifted",
                extra={"tab_id": str(tab_id), "restaurant_id": str(tab.restaurant_id)},
            )
            publish_event(
                self._publisher,
                restaurant_id=str(tab.restaurant_id),
                event_type=TAB_RECONCILED,
                message=serialize_tab_event(
                    event,
                    trace_id=trace_ctx.trace_id,
                    request_id=trace_ctx.request_id,
                ),
            )

        return ReconcileTabResponse(
            tab=to_tab_response(tab),
            drifted=event.drifted,
            previous=to_aggregates_response(previous),
        )
