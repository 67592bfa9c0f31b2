from __future__ import annotations

import sys
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from billo.domain.common.ids import OrderId, OrderItemId, RestaurantId, TabId, WaiterId
from billo.domain.common.money import Money
from billo.domain.order.entities import OrderStatus, create_order_item, create_pending_order
from billo.domain.tab.aggregates import compute_aggregates
from billo.domain.tab.entities import Tab, TabStateError, open_tab
from billo.domain.tab.transitions import TabStatus, TabTransitionError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _tab(**overrides) -> Tab:
    tab = open_tab(
        tab_id=TabId("tab_1"),
        restaurant_id=RestaurantId("rst_1"),
        reference_number="1",
        reference_date=date(2026, 10, 19),
        currency="USD",
        now=NOW,
    )
    return replace(tab, **overrides) if overrides else tab


def _order(order_id: str = "ord_1", cents: int = 500, quantity: int = 2, tab_id: str = "tab_1"):
    item = create_order_item(
        item_id=OrderItemId(f"oit_{order_id}"),
        menu_item_id=None,
        name="Fries",
        unit_price=Money(amount_cents=cents, currency="USD"),
        quantity=quantity,
    )
    return create_pending_order(
        order_id=OrderId(order_id),
        tab_id=TabId(tab_id),
        restaurant_id=RestaurantId("rst_1"),
        items=[item],
        waiter_id=WaiterId("wtr_ana"),
        waiter_name="Ana",
        now=NOW,
    )


def test_customer_opened_tab_is_inactive_and_empty() -> None:
    tab = _tab()
    assert tab.status == TabStatus.INACTIVE
    assert tab.waiter_id is None
    assert tab.total == Money.zero("USD")
    assert (tab.order_count, tab.item_count, tab.version) == (0, 0, 1)


def test_waiter_opened_tab_is_active() -> None:
    tab = open_tab(
        tab_id=TabId("tab_2"),
        restaurant_id=RestaurantId("rst_1"),
        reference_number="2",
        reference_date=date(2026, 10, 19),
        currency="USD",
        now=NOW,
        waiter_id=WaiterId("wtr_ana"),
        waiter_name="Ana",
    )
    assert tab.status == TabStatus.ACTIVE
    assert tab.waiter_name == "Ana"


def test_inactive_tab_cannot_carry_orders_or_a_waiter() -> None:
    with pytest.raises(ValueError, match="inactive tab"):
        _tab(order_count=1)
    with pytest.raises(ValueError, match="inactive tab"):
        _tab(total=Money(amount_cents=100, currency="USD"))
    with pytest.raises(ValueError, match="waiter"):
        _tab(waiter_id=WaiterId("wtr_ana"), waiter_name="Ana")


def test_active_tab_requires_waiter_fields() -> None:
    with pytest.raises(ValueError, match="requires waiter_id"):
        _tab(status=TabStatus.ACTIVE)


def test_activate_assigns_waiter() -> None:
    tab = _tab().activate(WaiterId("wtr_ana"), "Ana", NOW)
    assert tab.status == TabStatus.ACTIVE
    assert tab.waiter_id == "wtr_ana"


def test_activate_without_waiter_names_the_precondition() -> None:
    with pytest.raises(TabTransitionError) as exc_info:
        _tab().activate(WaiterId(""), "", NOW)
    assert exc_info.value.reason == "WAITER_REQUIRED"
    assert "a waiter must be assigned" in str(exc_info.value)


def test_activate_twice_is_a_state_error() -> None:
    tab = _tab().activate(WaiterId("wtr_ana"), "Ana", NOW)
    with pytest.raises(TabStateError) as exc_info:
        tab.activate(WaiterId("wtr_ana"), "Ana", NOW)
    assert exc_info.value.reason == "TAB_NOT_INACTIVE"


def test_status_moves_forward_through_the_bill_flow() -> None:
    tab = _tab().activate(WaiterId("wtr_ana"), "Ana", NOW)
    for status in (TabStatus.PENDING_ACCEPTANCE, TabStatus.BILL_ACCEPTED, TabStatus.COMPLETED):
        tab = tab.transition_to(status, NOW)
    assert tab.status == TabStatus.COMPLETED
    assert tab.is_closed


@pytest.mark.parametrize(
    ("path", "target", "reason"),
    [
        ([TabStatus.PENDING_ACCEPTANCE], TabStatus.ACTIVE, "ILLEGAL_TRANSITION"),
        ([], TabStatus.COMPLETED, "ILLEGAL_TRANSITION"),
        ([], TabStatus.ACTIVE, "NO_OP_TRANSITION"),
        ([TabStatus.CANCELLED], TabStatus.ACTIVE, "TAB_CLOSED"),
        (
            [TabStatus.PENDING_ACCEPTANCE, TabStatus.BILL_ACCEPTED, TabStatus.COMPLETED],
            TabStatus.CANCELLED,
            "TAB_CLOSED",
        ),
    ],
)
def test_status_never_moves_backward_or_out_of_a_terminal_state(path, target, reason) -> None:
    tab = _tab().activate(WaiterId("wtr_ana"), "Ana", NOW)
    for status in path:
        tab = tab.transition_to(status, NOW)
    with pytest.raises(TabTransitionError) as exc_info:
        tab.transition_to(target, NOW)
    assert exc_info.value.reason == reason


def test_inactive_tab_cannot_be_cancelled() -> None:
    with pytest.raises(TabTransitionError):
        _tab().transition_to(TabStatus.CANCELLED, NOW)


def test_first_order_activates_inactive_tab() -> None:
    tab, activated = _tab().append_order(_order(), NOW)
    assert activated is True
    assert tab.status == TabStatus.ACTIVE
    assert tab.waiter_id == "wtr_ana"
    assert tab.total.amount_cents == 1000
    assert (tab.order_count, tab.item_count) == (1, 2)


def test_later_orders_accumulate_without_reactivating() -> None:
    tab, _ = _tab().append_order(_order("ord_1"), NOW)
    tab, activated = tab.append_order(_order("ord_2", cents=250, quantity=1), NOW)
    assert activated is False
    assert tab.total.amount_cents == 1250
    assert (tab.order_count, tab.item_count) == (2, 3)


def test_orders_cannot_be_added_to_closed_tabs() -> None:
    tab, _ = _tab().append_order(_order(), NOW)
    tab = tab.transition_to(TabStatus.CANCELLED, NOW)
    with pytest.raises(TabStateError) as exc_info:
        tab.append_order(_order("ord_2"), NOW)
    assert exc_info.value.reason == "TAB_CLOSED"


def test_order_for_another_tab_is_rejected() -> None:
    with pytest.raises(ValueError, match="belongs to tab"):
        _tab().append_order(_order(tab_id="tab_other"), NOW)


def test_withdraw_order_keeps_order_count() -> None:
    order = _order()
    tab, _ = _tab().append_order(order, NOW)
    tab = tab.withdraw_order(order, NOW)
    assert tab.total.amount_cents == 0
    assert (tab.order_count, tab.item_count) == (1, 0)


def test_withdraw_order_from_drifted_aggregates_is_refused() -> None:
    order = _order()
    tab, _ = _tab().append_order(order, NOW)
    drifted = replace(tab, total=Money(amount_cents=100, currency="USD"), item_count=0)

    with pytest.raises(TabStateError) as exc_info:
        drifted.withdraw_order(order, NOW)

    assert exc_info.value.reason == "AGGREGATES_DRIFTED"


def test_aggregates_ignore_cancelled_orders_but_count_them() -> None:
    kept = _order("ord_1", cents=500, quantity=2)
    cancelled = _order("ord_2", cents=900, quantity=1).transition_to(OrderStatus.CANCELLED, NOW)
    aggregates = compute_aggregates([kept, cancelled], "USD")
    assert aggregates.total.amount_cents == 1000
    assert aggregates.order_count == 2
    assert aggregates.item_count == 2


def test_aggregates_reject_foreign_currency() -> None:
    with pytest.raises(ValueError, match="currency"):
        compute_aggregates([_order()], "EUR")


def test_with_aggregates_refuses_orders_on_inactive_tab() -> None:
    aggregates = compute_aggregates([_order()], "USD")
    with pytest.raises(TabStateError) as exc_info:
        _tab().with_aggregates(aggregates, NOW)
    assert exc_info.value.reason == "INACTIVE_TAB_HAS_ORDERS"


def test_tab_with_orders_is_not_deletable() -> None:
    _tab().ensure_deletable()
    tab, _ = _tab().append_order(_order(), NOW)
    with pytest.raises(TabStateError) as exc_info:
        tab.ensure_deletable()
    assert exc_info.value.reason == "TAB_HAS_ORDERS"
