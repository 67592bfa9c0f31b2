from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

from billo.domain.common.ids import RestaurantId, TabId, WaiterId
from billo.domain.common.money import Money
from billo.domain.order.entities import Order
from billo.domain.tab.aggregates import TabAggregates
from billo.domain.tab.transitions import TERMINAL_STATUSES, TabStatus, check_transition


@dataclass(frozen=True)
class Tab:
    tab_id: TabId
    restaurant_id: RestaurantId
    reference_number: str
    reference_date: date
    status: TabStatus
    total: Money
    order_count: int
    item_count: int
    created_at: datetime
    updated_at: datetime
    waiter_id: WaiterId | None = None
    waiter_name: str | None = None
    customer_name: str | None = None
    table_number: str | None = None
    version: int = 1

    def __post_init__(self) -> None:
        if not self.reference_number:
            raise ValueError("reference_number is required")
        if self.order_count < 0 or self.item_count < 0:
            raise ValueError("order_count and item_count must be >= 0")
        if self.status == TabStatus.INACTIVE:
            if self.total.amount_cents != 0 or self.order_count != 0 or self.item_count != 0:
                raise ValueError("inactive tab must have zero total and no orders")
            if self.waiter_id is not None:
                raise ValueError("inactive tab must not have a waiter assigned")
        elif self.waiter_id is None or not self.waiter_name:
            raise ValueError(f"{self.status.value} tab requires waiter_id and waiter_name")

    @property
    def currency(self) -> str:
        return self.total.currency

    @property
    def is_closed(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def activate(self, waiter_id: WaiterId, waiter_name: str, now: datetime) -> Tab:
        if self.status != TabStatus.INACTIVE:
            raise TabStateError(
                f"cannot activate tab {self.tab_id}: tab is {self.status.value}, not inactive",
                reason="TAB_NOT_INACTIVE",
            )
        check_transition(self.tab_id, self.status, TabStatus.ACTIVE, has_waiter=bool(waiter_id))
        return replace(
            self,
            status=TabStatus.ACTIVE,
            waiter_id=waiter_id,
            waiter_name=waiter_name,
            updated_at=now,
        )

    def transition_to(self, status: TabStatus, now: datetime) -> Tab:
        check_transition(self.tab_id, self.status, status, has_waiter=self.waiter_id is not None)
        return replace(self, status=status, updated_at=now)

    def ensure_open_for_orders(self) -> None:
        if self.is_closed:
            raise TabStateError(
                f"cannot add orders to tab {self.tab_id}: tab is {self.status.value}",
                reason="TAB_CLOSED",
            )

    def append_order(self, order: Order, now: datetime) -> tuple[Tab, bool]:
        """Fold a new order into the aggregates.

        The first order of an inactive tab activates it for the ordering
        waiter. Returns the updated tab and whether that happened.
        """
        self.ensure_open_for_orders()
        if order.tab_id != self.tab_id:
            raise ValueError(f"order {order.order_id} belongs to tab {order.tab_id}")

        activated = self.status == TabStatus.INACTIVE
        tab = self.activate(order.waiter_id, order.waiter_name, now) if activated else self
        return (
            replace(
                tab,
                total=tab.total + order.total,
                order_count=tab.order_count + 1,
                item_count=tab.item_count + order.item_count,
                updated_at=now,
            ),
            activated,
        )

    def withdraw_order(self, order: Order, now: datetime) -> Tab:
        """Take a cancelled order out of total and item_count."""
        self.ensure_open_for_orders()
        if (
            self.total.amount_cents < order.total.amount_cents
            or self.item_count < order.item_count
        ):
            raise TabStateError(
                f"cannot withdraw order {order.order_id} from tab {self.tab_id}: "
                "cached aggregates have drifted, reconcile the tab first",
                reason="AGGREGATES_DRIFTED",
            )
        return replace(
            self,
            total=self.total - order.total,
            item_count=self.item_count - order.item_count,
            updated_at=now,
        )

    def with_aggregates(self, aggregates: TabAggregates, now: datetime) -> Tab:
        if self.status == TabStatus.INACTIVE and aggregates.order_count > 0:
            raise TabStateError(
                f"tab {self.tab_id} is inactive but has {aggregates.order_count} orders",
                reason="INACTIVE_TAB_HAS_ORDERS",
            )
        return replace(
            self,
            total=aggregates.total,
            order_count=aggregates.order_count,
            item_count=aggregates.item_count,
            updated_at=now,
        )

    def aggregates(self) -> TabAggregates:
        return TabAggregates(
            total=self.total,
            order_count=self.order_count,
            item_count=self.item_count,
        )

    def ensure_deletable(self) -> None:
        if self.order_count > 0:
            raise TabStateError(
                f"cannot delete tab {self.tab_id}: it has {self.order_count} orders",
                reason="TAB_HAS_ORDERS",
            )


def open_tab(
    tab_id: TabId,
    restaurant_id: RestaurantId,
    reference_number: str,
    reference_date: date,
    currency: str,
    now: datetime,
    *,
    waiter_id: WaiterId | None = None,
    waiter_name: str | None = None,
    customer_name: str | None = None,
    table_number: str | None = None,
) -> Tab:
    """Build a fresh tab: active when a waiter opens it, inactive otherwise."""
    return Tab(
        tab_id=tab_id,
        restaurant_id=restaurant_id,
        reference_number=reference_number,
        reference_date=reference_date,
        status=TabStatus.ACTIVE if waiter_id is not None else TabStatus.INACTIVE,
        total=Money.zero(currency),
        order_count=0,
        item_count=0,
        created_at=now,
        updated_at=now,
        waiter_id=waiter_id,
        waiter_name=waiter_name,
        customer_name=customer_name,
        table_number=table_number,
    )


class TabStateError(Exception):
    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason
