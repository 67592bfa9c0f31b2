from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from billo.domain.order.entities import Order, OrderStatus
from billo.domain.tab.transitions import TabStatus

TABS_CREATED_TOTAL = Counter(
    "billo_tabs_created_total",
    "Total number of tabs created.",
    ["restaurant_id", "initiator"],
)

TAB_TRANSITION_TOTAL = Counter(
    "billo_tab_transition_total",
    "Total number of tab status transitions.",
    ["from", "to"],
)

TAB_TRANSITION_BLOCKED_TOTAL = Counter(
    "billo_tab_transition_blocked_total",
    "Total number of rejected tab status transitions.",
    ["reason"],
)

ORDERS_APPENDED_TOTAL = Counter(
    "billo_orders_appended_total",
    "Total number of orders appended to tabs.",
    ["restaurant_id"],
)

ORDER_VALUE_CENTS = Histogram(
    "billo_order_value_cents",
    "Order totals in minor currency units.",
    buckets=(500, 1000, 2000, 5000, 10000, 20000, 50000, 100000),
)

ORDER_TRANSITION_TOTAL = Counter(
    "billo_order_transition_total",
    "Total number of order status transitions.",
    ["from", "to"],
)

TAB_RECONCILE_DRIFT_TOTAL = Counter(
    "billo_tab_reconcile_drift_total",
    "Total number of reconciliations that corrected drifted aggregates.",
    ["restaurant_id"],
)

PROJECTION_SUBSCRIPTIONS = Gauge(
    "billo_projection_subscriptions",
    "Live projection subscriptions by topic kind.",
    ["kind"],
)


def record_tab_created(restaurant_id: str, initiator: str) -> None:
    TABS_CREATED_TOTAL.labels(restaurant_id=restaurant_id, initiator=initiator).inc()


def record_tab_transition(from_status: TabStatus, to_status: TabStatus) -> None:
    TAB_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_tab_transition_blocked(reason: str) -> None:
    TAB_TRANSITION_BLOCKED_TOTAL.labels(reason=reason).inc()


def record_order_appended(order: Order) -> None:
    ORDERS_APPENDED_TOTAL.labels(restaurant_id=str(order.restaurant_id)).inc()
    ORDER_VALUE_CENTS.observe(order.total.amount_cents)


def record_order_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_reconcile_drift(restaurant_id: str) -> None:
    TAB_RECONCILE_DRIFT_TOTAL.labels(restaurant_id=restaurant_id).inc()


def topic_kind(topic: str) -> str:
    head, _, rest = topic.partition(":")
    suffix = rest.rpartition(":")[2] if ":" in rest else ""
    return f"{head}:{suffix}" if suffix else head


def record_subscription_opened(topic: str) -> None:
    PROJECTION_SUBSCRIPTIONS.labels(kind=topic_kind(topic)).inc()


def record_subscription_closed(topic: str) -> None:
    PROJECTION_SUBSCRIPTIONS.labels(kind=topic_kind(topic)).dec()
