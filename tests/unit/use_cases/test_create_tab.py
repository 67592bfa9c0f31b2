from __future__ import annotations

import json
from datetime import date

import pytest
from support import OTHER_RESTAURANT_ID, OTHER_WAITER_ID, RESTAURANT_ID, WAITER_ID

from billo.application.dto.requests import CreateTabRequest
from billo.application.errors import (
    RestaurantNotFoundError,
    ValidationError,
    WaiterNotFoundError,
)
from billo.application.use_cases.create_tab import CreateTab
from billo.domain.common.ids import RestaurantId


def _create_tab(store) -> CreateTab:
    return CreateTab(store.tabs, store.waiters, store.publisher, clock=store.clock)


def test_customer_tab_starts_inactive_with_first_reference(store, trace_ctx) -> None:
    tab = _create_tab(store).execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert tab.referenceNumber == "1"
    assert tab.referenceDate == date(2026, 10, 19)
    assert tab.status == "inactive"
    assert tab.waiterId is None
    assert tab.total.amountCents == 0
    assert tab.total.currency == "USD"

    restaurant = store.restaurants.get(RESTAURANT_ID)
    assert restaurant.daily_tab_counter == 1
    assert restaurant.last_tab_reset == date(2026, 10, 19)


def test_waiter_tab_starts_active_for_that_waiter(store, trace_ctx) -> None:
    tab = _create_tab(store).execute(
        RESTAURANT_ID,
        CreateTabRequest(initiator="waiter", waiterId=WAITER_ID, tableNumber="7"),
        trace_ctx,
    )

    assert tab.status == "active"
    assert tab.waiterId == WAITER_ID
    assert tab.waiterName == "Ana"
    assert tab.tableNumber == "7"


def test_references_count_up_within_a_day_and_restart_the_next(store, trace_ctx) -> None:
    use_case = _create_tab(store)
    first = use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    second = use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    store.clock.advance(days=1)
    next_day = use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert [first.referenceNumber, second.referenceNumber] == ["1", "2"]
    assert next_day.referenceNumber == "1"
    assert next_day.referenceDate == date(2026, 10, 20)


def test_reference_day_follows_the_restaurant_timezone(store, trace_ctx) -> None:
    use_case = _create_tab(store)
    # 12:00 UTC is 14:00 in Berlin; 23:30 UTC is already the next day there.
    use_case.execute(OTHER_RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    store.clock.advance(hours=11, minutes=30)
    late = use_case.execute(OTHER_RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    same_day_usd = use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert late.referenceNumber == "1"
    assert late.referenceDate == date(2026, 10, 20)
    assert same_day_usd.referenceDate == date(2026, 10, 19)


def test_restaurants_keep_separate_counters(store, trace_ctx) -> None:
    use_case = _create_tab(store)
    use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    use_case.execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)
    other = use_case.execute(OTHER_RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert other.referenceNumber == "1"
    assert other.total.currency == "EUR"


def test_created_tab_is_published(store, trace_ctx) -> None:
    tab = _create_tab(store).execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert len(store.publisher.messages) == 1
    channel, message = store.publisher.messages[0]
    envelope = json.loads(message)
    assert channel == "events:rst_1"
    assert envelope["event_type"] == "tab.created"
    assert envelope["request_id"] == "req_test"
    assert envelope["payload"]["initiator"] == "customer"
    assert envelope["payload"]["tab"]["tabId"] == tab.tabId


def test_customer_request_with_waiter_is_rejected(store, trace_ctx) -> None:
    with pytest.raises(ValidationError) as exc_info:
        _create_tab(store).execute(
            RESTAURANT_ID,
            CreateTabRequest(initiator="customer", waiterId=WAITER_ID),
            trace_ctx,
        )
    assert exc_info.value.code == "UNEXPECTED_WAITER"
    assert store.tabs.rows == {}


def test_waiter_request_requires_waiter_id(store, trace_ctx) -> None:
    with pytest.raises(ValidationError) as exc_info:
        _create_tab(store).execute(RESTAURANT_ID, CreateTabRequest(initiator="waiter"), trace_ctx)
    assert exc_info.value.code == "WAITER_REQUIRED"


def test_waiter_from_another_restaurant_is_not_found(store, trace_ctx) -> None:
    with pytest.raises(WaiterNotFoundError):
        _create_tab(store).execute(
            RESTAURANT_ID,
            CreateTabRequest(initiator="waiter", waiterId=OTHER_WAITER_ID),
            trace_ctx,
        )
    assert store.restaurants.get(RESTAURANT_ID).daily_tab_counter == 0


def test_unknown_restaurant_is_not_found(store, trace_ctx) -> None:
    with pytest.raises(RestaurantNotFoundError) as exc_info:
        _create_tab(store).execute(RestaurantId("rst_missing"), CreateTabRequest(), trace_ctx)
    assert exc_info.value.details == {"restaurantId": "rst_missing"}


def test_publish_failure_does_not_fail_the_request(store, trace_ctx) -> None:
    store.publisher.fail = True
    tab = _create_tab(store).execute(RESTAURANT_ID, CreateTabRequest(), trace_ctx)

    assert store.tabs.get(tab.tabId) is not None
