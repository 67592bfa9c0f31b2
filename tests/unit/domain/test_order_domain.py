from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from billo.domain.common.ids import MenuItemId, OrderId, OrderItemId, RestaurantId, TabId, WaiterId
from billo.domain.common.money import Money
from billo.domain.order.entities import (
    OrderStatus,
    OrderTransitionError,
    create_order_item,
    create_pending_order,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _item(item_id: str, cents: int, quantity: int, currency: str = "USD"):
    return create_order_item(
        item_id=OrderItemId(item_id),
        menu_item_id=MenuItemId("itm_1"),
        name="Burger",
        unit_price=Money(amount_cents=cents, currency=currency),
        quantity=quantity,
    )


def _order(*items):
    return create_pending_order(
        order_id=OrderId("ord_1"),
        tab_id=TabId("tab_1"),
        restaurant_id=RestaurantId("rst_1"),
        items=list(items),
        waiter_id=WaiterId("wtr_ana"),
        waiter_name="Ana",
        now=NOW,
    )


def test_order_total_and_item_count_come_from_lines() -> None:
    order = _order(_item("oit_1", 1250, 2), _item("oit_2", 300, 1))
    assert order.status == OrderStatus.PENDING
    assert order.total == Money(amount_cents=2800, currency="USD")
    assert order.item_count == 3
    assert order.counts_toward_total


def test_empty_orders_and_bad_lines_are_rejected() -> None:
    with pytest.raises(ValueError, match="at least one item"):
        _order()
    with pytest.raises(ValueError, match="quantity"):
        _item("oit_1", 1250, 0)
    with pytest.raises(ValueError, match="price"):
        _item("oit_1", 0, 1)


def test_mixed_currency_lines_are_rejected() -> None:
    with pytest.raises(ValueError, match="currency"):
        _order(_item("oit_1", 100, 1), _item("oit_2", 100, 1, currency="EUR"))


def test_kitchen_flow_and_terminal_states() -> None:
    order = _order(_item("oit_1", 100, 1))
    for status in (OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.SERVED):
        order = order.transition_to(status, NOW)
    assert order.status == OrderStatus.SERVED
    with pytest.raises(OrderTransitionError):
        order.transition_to(OrderStatus.CANCELLED, NOW)


def test_cancelled_order_stops_counting() -> None:
    order = _order(_item("oit_1", 100, 1)).transition_to(OrderStatus.CANCELLED, NOW)
    assert not order.counts_toward_total
    with pytest.raises(OrderTransitionError) as exc_info:
        order.transition_to(OrderStatus.PREPARING, NOW)
    assert exc_info.value.from_status == OrderStatus.CANCELLED
