from __future__ import annotations

from datetime import date
from typing import Callable, Protocol

from billo.domain.common.ids import MenuItemId, OrderId, RestaurantId, TabId, WaiterId
from billo.domain.menu.entities import MenuItem
from billo.domain.order.entities import Order, OrderStatus
from billo.domain.restaurant.entities import Restaurant
from billo.domain.tab.entities import Tab
from billo.domain.tab.transitions import TabStatus
from billo.domain.waiter.entities import Waiter

# Decide functions run inside the repository transaction, after the rows they
# receive have been locked. They must be pure: raise to abort, return to commit.
BuildTab = Callable[[Restaurant], tuple[Restaurant, Tab]]
DecideTab = Callable[[Tab], Tab]
DecideAppend = Callable[[Tab], tuple[Tab, Order]]
DecideOrderStatus = Callable[[Tab, Order], tuple[Tab, Order]]
DecideReconcile = Callable[[Tab, list[Order]], Tab]
CheckDelete = Callable[[Tab, int], None]


class RestaurantRepository(Protocol):
    def add(self, restaurant: Restaurant) -> None: ...

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None: ...

    def get_by_owner(self, owner_id: str) -> Restaurant | None: ...


class TabRepository(Protocol):
    def create(self, restaurant_id: RestaurantId, build: BuildTab) -> Tab: ...

    def get(self, tab_id: TabId) -> Tab | None: ...

    def get_by_reference(
        self,
        restaurant_id: RestaurantId,
        reference_number: str,
        reference_date: date,
    ) -> Tab | None: ...

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        statuses: frozenset[TabStatus] | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Tab], str | None]: ...

    def mutate(self, tab_id: TabId, decide: DecideTab) -> tuple[Tab, Tab]: ...

    def append_order(
        self,
        tab_id: TabId,
        decide: DecideAppend,
    ) -> tuple[Tab, Tab, Order]: ...

    def update_order_status(
        self,
        order_id: OrderId,
        decide: DecideOrderStatus,
    ) -> tuple[Tab, Order, Order]: ...

    def reconcile(self, tab_id: TabId, decide: DecideReconcile) -> tuple[Tab, Tab]: ...

    def delete(self, tab_id: TabId, check: CheckDelete) -> Tab: ...


class OrderRepository(Protocol):
    def get(self, order_id: OrderId) -> Order | None: ...

    def list_for_tab(self, tab_id: TabId) -> list[Order]: ...

    def page_for_tab(
        self,
        tab_id: TabId,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]: ...


class MenuRepository(Protocol):
    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[MenuItem]: ...

    def get(self, item_id: MenuItemId) -> MenuItem | None: ...

    def get_many(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]: ...

    def add(self, item: MenuItem) -> None: ...

    def update(self, item: MenuItem) -> None: ...

    def delete(self, item_id: MenuItemId) -> bool: ...


class WaiterRepository(Protocol):
    def add(self, waiter: Waiter) -> None: ...

    def get(self, waiter_id: WaiterId) -> Waiter | None: ...

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Waiter]: ...

    def get_by_pin(self, restaurant_id: RestaurantId, pin: str) -> Waiter | None: ...

    def delete(self, waiter_id: WaiterId) -> bool: ...


class RowNotFoundError(Exception):
    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} {key} not found")
        self.entity = entity
        self.key = key


class InvalidCursorError(Exception):
    pass


class DuplicateRowError(Exception):
    def __init__(self, entity: str, field: str) -> None:
        super().__init__(f"{entity} with that {field} already exists")
        self.entity = entity
        self.field = field
