from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from billo.application.ports.repositories import InvalidCursorError, RowNotFoundError
from billo.application.use_cases.context import TraceContext
from billo.domain.common.ids import MenuItemId, OrderId, RestaurantId, TabId, WaiterId
from billo.domain.common.money import Money
from billo.domain.menu.entities import MenuCategory, MenuItem
from billo.domain.order.entities import Order, OrderStatus
from billo.domain.restaurant.entities import Restaurant
from billo.domain.tab.entities import Tab
from billo.domain.waiter.entities import Waiter

RESTAURANT_ID = RestaurantId("rst_1")
OTHER_RESTAURANT_ID = RestaurantId("rst_2")
WAITER_ID = WaiterId("wtr_ana")
OTHER_WAITER_ID = WaiterId("wtr_zed")
BURGER_ID = MenuItemId("itm_burger")
SODA_ID = MenuItemId("itm_soda")
SOLD_OUT_ID = MenuItemId("itm_soup")


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingPublisher:
    def __init__(self, fail: bool = False) -> None:
        self.messages: list[tuple[str, str]] = []
        self.fail = fail

    def publish(self, channel: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.messages.append((channel, message))


class FakeCacheStore:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.deleted: list[str] = []

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.values.pop(key, None)


class InMemoryRestaurantRepository:
    def __init__(self) -> None:
        self.rows: dict[RestaurantId, Restaurant] = {}

    def add(self, restaurant: Restaurant) -> None:
        self.rows[restaurant.restaurant_id] = restaurant

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        return self.rows.get(restaurant_id)

    def get_by_owner(self, owner_id: str) -> Restaurant | None:
        for restaurant in self.rows.values():
            if restaurant.owner_id == owner_id:
                return restaurant
        return None


class InMemoryWaiterRepository:
    def __init__(self) -> None:
        self.rows: dict[WaiterId, Waiter] = {}

    def add(self, waiter: Waiter) -> None:
        self.rows[waiter.waiter_id] = waiter

    def get(self, waiter_id: WaiterId) -> Waiter | None:
        return self.rows.get(waiter_id)

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Waiter]:
        waiters = [w for w in self.rows.values() if w.restaurant_id == restaurant_id]
        return sorted(waiters, key=lambda w: (w.name, w.waiter_id))

    def get_by_pin(self, restaurant_id: RestaurantId, pin: str) -> Waiter | None:
        for waiter in self.rows.values():
            if waiter.restaurant_id == restaurant_id and waiter.pin == pin:
                return waiter
        return None

    def delete(self, waiter_id: WaiterId) -> bool:
        return self.rows.pop(waiter_id, None) is not None


class InMemoryMenuRepository:
    def __init__(self) -> None:
        self.rows: dict[MenuItemId, MenuItem] = {}
        self.list_calls = 0

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[MenuItem]:
        self.list_calls += 1
        return [item for item in self.rows.values() if item.restaurant_id == restaurant_id]

    def get(self, item_id: MenuItemId) -> MenuItem | None:
        return self.rows.get(item_id)

    def get_many(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        return {item_id: self.rows[item_id] for item_id in item_ids if item_id in self.rows}

    def add(self, item: MenuItem) -> None:
        self.rows[item.item_id] = item

    def update(self, item: MenuItem) -> None:
        if item.item_id in self.rows:
            self.rows[item.item_id] = item

    def delete(self, item_id: MenuItemId) -> bool:
        return self.rows.pop(item_id, None) is not None


def _page(rows: list, limit: int, cursor: str | None) -> tuple[list, str | None]:
    start = 0
    if cursor:
        if not cursor.startswith("idx:") or not cursor[4:].isdigit():
            raise InvalidCursorError("invalid cursor")
        start = int(cursor[4:])
    page = rows[start : start + limit]
    next_cursor = f"idx:{start + limit}" if len(rows) > start + limit else None
    return page, next_cursor


class InMemoryTabRepository:
    """Same contract as the SQL repository: decide runs against the current
    row, the result is stored only when decide returns, and the version is
    bumped on change."""

    def __init__(self, restaurants: InMemoryRestaurantRepository) -> None:
        self._restaurants = restaurants
        self.rows: dict[TabId, Tab] = {}
        self.orders: dict[OrderId, Order] = {}

    def create(self, restaurant_id, build) -> Tab:
        restaurant = self._restaurants.get(restaurant_id)
        if restaurant is None:
            raise RowNotFoundError("restaurant", str(restaurant_id))
        updated, tab = build(restaurant)
        self._restaurants.rows[restaurant_id] = updated
        self.rows[tab.tab_id] = tab
        return tab

    def get(self, tab_id: TabId) -> Tab | None:
        return self.rows.get(tab_id)

    def get_by_reference(self, restaurant_id, reference_number, reference_date) -> Tab | None:
        for tab in self.rows.values():
            if (
                tab.restaurant_id == restaurant_id
                and tab.reference_number == reference_number
                and tab.reference_date == reference_date
            ):
                return tab
        return None

    def list_for_restaurant(self, restaurant_id, statuses, limit, cursor):
        tabs = [
            tab
            for tab in self.rows.values()
            if tab.restaurant_id == restaurant_id and (statuses is None or tab.status in statuses)
        ]
        tabs.sort(key=lambda tab: (tab.created_at, tab.tab_id), reverse=True)
        return _page(tabs, limit, cursor)

    def mutate(self, tab_id, decide):
        before = self._require(tab_id)
        after = decide(before)
        if after != before:
            after = replace(after, version=before.version + 1)
            self.rows[tab_id] = after
        return before, after

    def append_order(self, tab_id, decide):
        before = self._require(tab_id)
        tab, order = decide(before)
        tab = replace(tab, version=before.version + 1)
        self.rows[tab_id] = tab
        self.orders[order.order_id] = order
        return before, tab, order

    def update_order_status(self, order_id, decide):
        previous = self.orders.get(order_id)
        if previous is None:
            raise RowNotFoundError("order", str(order_id))
        before = self._require(previous.tab_id)
        tab, order = decide(before, previous)
        self.orders[order_id] = order
        if tab != before:
            tab = replace(tab, version=before.version + 1)
            self.rows[tab.tab_id] = tab
        return tab, previous, order

    def reconcile(self, tab_id, decide):
        before = self._require(tab_id)
        after = decide(before, self.orders_for(tab_id))
        if after != before:
            after = replace(after, version=before.version + 1)
            self.rows[tab_id] = after
        return before, after

    def delete(self, tab_id, check):
        tab = self._require(tab_id)
        check(tab, len(self.orders_for(tab_id)))
        del self.rows[tab_id]
        return tab

    def orders_for(self, tab_id: TabId) -> list[Order]:
        orders = [order for order in self.orders.values() if order.tab_id == tab_id]
        return sorted(orders, key=lambda order: (order.created_at, order.order_id))

    def _require(self, tab_id: TabId) -> Tab:
        tab = self.rows.get(tab_id)
        if tab is None:
            raise RowNotFoundError("tab", str(tab_id))
        return tab


class InMemoryOrderRepository:
    def __init__(self, tabs: InMemoryTabRepository) -> None:
        self._tabs = tabs

    def get(self, order_id: OrderId) -> Order | None:
        return self._tabs.orders.get(order_id)

    def list_for_tab(self, tab_id: TabId) -> list[Order]:
        return self._tabs.orders_for(tab_id)

    def page_for_tab(self, tab_id, status: OrderStatus | None, limit, cursor):
        orders = [
            order
            for order in reversed(self._tabs.orders_for(tab_id))
            if status is None or order.status == status
        ]
        return _page(orders, limit, cursor)


@dataclass
class Store:
    restaurants: InMemoryRestaurantRepository
    waiters: InMemoryWaiterRepository
    menu: InMemoryMenuRepository
    tabs: InMemoryTabRepository
    orders: InMemoryOrderRepository
    clock: FakeClock = field(default_factory=FakeClock)
    publisher: RecordingPublisher = field(default_factory=RecordingPublisher)
    cache: FakeCacheStore = field(default_factory=FakeCacheStore)


def seed(store: Store) -> None:
    store.restaurants.add(
        Restaurant(restaurant_id=RESTAURANT_ID, owner_id="own_1", name="Bistro", currency="USD")
    )
    store.restaurants.add(
        Restaurant(
            restaurant_id=OTHER_RESTAURANT_ID,
            owner_id="own_2",
            name="Elsewhere",
            currency="EUR",
            timezone="Europe/Berlin",
        )
    )
    store.waiters.add(Waiter(waiter_id=WAITER_ID, restaurant_id=RESTAURANT_ID, name="Ana", pin="1234"))
    store.waiters.add(
        Waiter(waiter_id=OTHER_WAITER_ID, restaurant_id=OTHER_RESTAURANT_ID, name="Zed", pin="9999")
    )
    store.menu.add(
        MenuItem(
            item_id=BURGER_ID,
            restaurant_id=RESTAURANT_ID,
            name="Burger",
            description="Beef, cheddar",
            price=Money(amount_cents=1250, currency="USD"),
            category=MenuCategory.FOOD,
        )
    )
    store.menu.add(
        MenuItem(
            item_id=SODA_ID,
            restaurant_id=RESTAURANT_ID,
            name="Soda",
            description=None,
            price=Money(amount_cents=300, currency="USD"),
            category=MenuCategory.DRINKS,
        )
    )
    store.menu.add(
        MenuItem(
            item_id=SOLD_OUT_ID,
            restaurant_id=RESTAURANT_ID,
            name="Soup",
            description=None,
            price=Money(amount_cents=600, currency="USD"),
            category=MenuCategory.APPETIZERS,
            is_available=False,
        )
    )


def make_store() -> Store:
    restaurants = InMemoryRestaurantRepository()
    tabs = InMemoryTabRepository(restaurants)
    built = Store(
        restaurants=restaurants,
        waiters=InMemoryWaiterRepository(),
        menu=InMemoryMenuRepository(),
        tabs=tabs,
        orders=InMemoryOrderRepository(tabs),
    )
    seed(built)
    return built


def make_trace_ctx() -> TraceContext:
    return TraceContext(trace_id="0" * 32, request_id="req_test")


def restaurant_day(store: Store) -> date:
    return store.restaurants.get(RESTAURANT_ID).local_date(store.clock())
