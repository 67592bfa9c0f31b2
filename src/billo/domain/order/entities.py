from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from billo.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderItemId,
    RestaurantId,
    TabId,
    WaiterId,
)
from billo.domain.common.money import Money


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    CANCELLED = "cancelled"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.SERVED, OrderStatus.CANCELLED}),
    OrderStatus.SERVED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class OrderItem:
    item_id: OrderItemId
    menu_item_id: MenuItemId | None
    name: str
    unit_price: Money
    quantity: int
    line_total: Money
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("item name is required")
        if self.unit_price.amount_cents <= 0:
            raise ValueError("price must be greater than 0")
        if self.quantity < 1:
            raise ValueError("quantity must be greater than 0")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        if self.line_total != self.unit_price.times(self.quantity):
            raise ValueError("line_total must equal unit_price * quantity")


def create_order_item(
    item_id: OrderItemId,
    menu_item_id: MenuItemId | None,
    name: str,
    unit_price: Money,
    quantity: int,
    notes: str | None = None,
) -> OrderItem:
    if quantity < 1:
        raise ValueError("quantity must be greater than 0")
    return OrderItem(
        item_id=item_id,
        menu_item_id=menu_item_id,
        name=name,
        unit_price=unit_price,
        quantity=quantity,
        line_total=unit_price.times(quantity),
        notes=notes,
    )


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    tab_id: TabId
    restaurant_id: RestaurantId
    status: OrderStatus
    items: list[OrderItem]
    total: Money
    waiter_id: WaiterId
    waiter_name: str
    created_at: datetime
    updated_at: datetime
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must contain at least one item")
        item_currency = self.items[0].line_total.currency
        if any(item.line_total.currency != item_currency for item in self.items):
            raise ValueError("all order items must share one currency")
        if self.total.currency != item_currency:
            raise ValueError("order total currency must match item currency")
        expected_total = sum(item.line_total.amount_cents for item in self.items)
        if self.total.amount_cents != expected_total:
            raise ValueError("order total must equal sum of item line totals")

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def counts_toward_total(self) -> bool:
        return self.status != OrderStatus.CANCELLED

    def transition_to(self, status: OrderStatus, now: datetime) -> Order:
        if status not in ORDER_TRANSITIONS[self.status]:
            raise OrderTransitionError(
                f"cannot move order {self.order_id} from {self.status.value} to {status.value}",
                from_status=self.status,
                to_status=status,
            )
        return replace(self, status=status, updated_at=now)


def create_pending_order(
    order_id: OrderId,
    tab_id: TabId,
    restaurant_id: RestaurantId,
    items: list[OrderItem],
    waiter_id: WaiterId,
    waiter_name: str,
    now: datetime,
    notes: str | None = None,
) -> Order:
    if not items:
        raise ValueError("order must contain at least one item")

    currency = items[0].line_total.currency
    total = Money(
        amount_cents=sum(item.line_total.amount_cents for item in items),
        currency=currency,
    )
    return Order(
        order_id=order_id,
        tab_id=tab_id,
        restaurant_id=restaurant_id,
        status=OrderStatus.PENDING,
        items=items,
        total=total,
        waiter_id=waiter_id,
        waiter_name=waiter_name,
        created_at=now,
        updated_at=now,
        notes=notes,
    )


class OrderTransitionError(Exception):
    def __init__(self, message: str, from_status: OrderStatus, to_status: OrderStatus) -> None:
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status
