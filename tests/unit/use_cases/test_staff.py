from __future__ import annotations

import json

import pytest
from support import OTHER_RESTAURANT_ID, RESTAURANT_ID, WAITER_ID

from billo.application.dto.requests import (
    CreateRestaurantRequest,
    CreateWaiterRequest,
    WaiterLoginRequest,
)
from billo.application.errors import (
    RestaurantNotFoundError,
    StateError,
    ValidationError,
    WaiterNotFoundError,
)
from billo.application.use_cases.restaurants import (
    CreateRestaurant,
    GetRestaurant,
    GetRestaurantByOwner,
)
from billo.application.use_cases.waiters import CreateWaiter, DeleteWaiter, ListWaiters, WaiterLogin
from billo.domain.common.ids import RestaurantId, WaiterId


def test_create_and_get_restaurant(store) -> None:
    created = CreateRestaurant(store.restaurants).execute(
        CreateRestaurantRequest(name="Trattoria", ownerId="own_9", currency="eur", timezone="Europe/Rome")
    )

    fetched = GetRestaurant(store.restaurants).execute(RestaurantId(created.restaurantId))

    assert fetched.currency == "EUR"
    assert fetched.timezone == "Europe/Rome"
    assert fetched.dailyTabCounter == 0
    assert fetched.lastTabReset is None


@pytest.mark.parametrize(
    "request_dto",
    [
        CreateRestaurantRequest(name="Trattoria", ownerId=" "),
        CreateRestaurantRequest(name="", ownerId="own_9"),
        CreateRestaurantRequest(name="Trattoria", ownerId="own_9", currency="EURO"),
        CreateRestaurantRequest(name="Trattoria", ownerId="own_9", timezone="Nowhere/City"),
    ],
)
def test_invalid_restaurants_are_rejected(store, request_dto) -> None:
    with pytest.raises(ValidationError) as exc_info:
        CreateRestaurant(store.restaurants).execute(request_dto)
    assert exc_info.value.code == "INVALID_RESTAURANT"


def test_get_unknown_restaurant(store) -> None:
    with pytest.raises(RestaurantNotFoundError):
        GetRestaurant(store.restaurants).execute(RestaurantId("rst_missing"))


def test_owner_finds_their_restaurant(store) -> None:
    use_case = GetRestaurantByOwner(store.restaurants)

    assert use_case.execute(" own_1 ").restaurantId == RESTAURANT_ID
    assert use_case.execute("own_2").restaurantId == OTHER_RESTAURANT_ID

    with pytest.raises(RestaurantNotFoundError) as exc_info:
        use_case.execute("own_nobody")
    assert exc_info.value.details == {"ownerId": "own_nobody"}
    with pytest.raises(ValidationError) as exc_info:
        use_case.execute("  ")
    assert exc_info.value.code == "INVALID_OWNER"


def test_create_waiter_and_list(store, trace_ctx) -> None:
    created = CreateWaiter(store.waiters, store.restaurants, store.publisher).execute(
        RESTAURANT_ID, CreateWaiterRequest(name="Bo", pin="4321"), trace_ctx
    )

    listed = ListWaiters(store.waiters, store.restaurants).execute(RESTAURANT_ID)

    assert [waiter.name for waiter in listed.waiters] == ["Ana", "Bo"]
    assert created.waiterId.startswith("wtr_")
    envelope = json.loads(store.publisher.messages[-1][1])
    assert envelope["event_type"] == "waiter.updated"
    assert envelope["payload"] == {"waiterId": created.waiterId, "action": "created"}


def test_pin_must_be_unique_within_a_restaurant(store, trace_ctx) -> None:
    use_case = CreateWaiter(store.waiters, store.restaurants, store.publisher)

    with pytest.raises(StateError) as exc_info:
        use_case.execute(RESTAURANT_ID, CreateWaiterRequest(name="Bo", pin="1234"), trace_ctx)
    assert exc_info.value.code == "PIN_IN_USE"

    other = use_case.execute(OTHER_RESTAURANT_ID, CreateWaiterRequest(name="Bo", pin="1234"), trace_ctx)
    assert other.restaurantId == OTHER_RESTAURANT_ID


@pytest.mark.parametrize("pin", ["123", "12345", "abcd", "", "1234\n", "\u0661\u0662\u0663\u0664"])
def test_pin_must_be_four_digits(store, trace_ctx, pin) -> None:
    with pytest.raises(ValidationError) as exc_info:
        CreateWaiter(store.waiters, store.restaurants, store.publisher).execute(
            RESTAURANT_ID, CreateWaiterRequest(name="Bo", pin=pin), trace_ctx
        )
    assert exc_info.value.code == "INVALID_WAITER"


def test_login_matches_pin_within_restaurant(store) -> None:
    login = WaiterLogin(store.waiters)

    assert login.execute(RESTAURANT_ID, WaiterLoginRequest(pin="1234")).waiterId == WAITER_ID
    with pytest.raises(WaiterNotFoundError) as exc_info:
        login.execute(OTHER_RESTAURANT_ID, WaiterLoginRequest(pin="1234"))
    assert exc_info.value.code == "INVALID_PIN"


def test_delete_waiter(store, trace_ctx) -> None:
    use_case = DeleteWaiter(store.waiters, store.publisher)

    use_case.execute(WAITER_ID, trace_ctx)

    assert store.waiters.get(WAITER_ID) is None
    with pytest.raises(WaiterNotFoundError):
        use_case.execute(WaiterId(WAITER_ID), trace_ctx)


def test_waiters_of_unknown_restaurant(store) -> None:
    with pytest.raises(RestaurantNotFoundError):
        ListWaiters(store.waiters, store.restaurants).execute(RestaurantId("rst_missing"))
