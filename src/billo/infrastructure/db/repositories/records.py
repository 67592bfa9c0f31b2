from __future__ import annotations

import base64
from datetime import datetime, timezone

from billo.application.ports.repositories import InvalidCursorError
from billo.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderItemId,
    RestaurantId,
    TabId,
    WaiterId,
)
from billo.domain.common.money import Money
from billo.domain.order.entities import Order, OrderItem, OrderStatus
from billo.domain.restaurant.entities import Restaurant
from billo.domain.tab.entities import Tab
from billo.domain.tab.transitions import TabStatus
from billo.infrastructure.db.models.menu import RestaurantModel
from billo.infrastructure.db.models.order import OrderItemModel, OrderModel
from billo.infrastructure.db.models.tab import TabModel


def aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def restaurant_to_domain(model: RestaurantModel) -> Restaurant:
    return Restaurant(
        restaurant_id=RestaurantId(model.id),
        owner_id=model.owner_id,
        name=model.name,
        currency=model.currency,
        timezone=model.timezone,
        daily_tab_counter=model.daily_tab_counter,
        last_tab_reset=model.last_tab_reset,
    )


def tab_to_domain(model: TabModel) -> Tab:
    return Tab(
        tab_id=TabId(model.id),
        restaurant_id=RestaurantId(model.restaurant_id),
        reference_number=model.reference_number,
        reference_date=model.reference_date,
        status=TabStatus(model.status),
        total=Money(amount_cents=model.total_cents, currency=model.currency),
        order_count=model.order_count,
        item_count=model.item_count,
        created_at=aware(model.created_at),
        updated_at=aware(model.updated_at),
        waiter_id=WaiterId(model.waiter_id) if model.waiter_id else None,
        waiter_name=model.waiter_name,
        customer_name=model.customer_name,
        table_number=model.table_number,
        version=model.version,
    )


def tab_to_model(tab: Tab) -> TabModel:
    model = TabModel(
        id=str(tab.tab_id),
        restaurant_id=str(tab.restaurant_id),
        reference_number=tab.reference_number,
        reference_date=tab.reference_date,
        created_at=tab.created_at,
    )
    apply_tab(model, tab)
    return model


def apply_tab(model: TabModel, tab: Tab) -> None:
    """Copy the mutable tab fields onto a row."""
    model.status = tab.status.value
    model.waiter_id = str(tab.waiter_id) if tab.waiter_id else None
    model.waiter_name = tab.waiter_name
    model.customer_name = tab.customer_name
    model.table_number = tab.table_number
    model.total_cents = tab.total.amount_cents
    model.currency = tab.total.currency
    model.order_count = tab.order_count
    model.item_count = tab.item_count
    model.version = tab.version
    model.updated_at = tab.updated_at


def order_to_domain(model: OrderModel) -> Order:
    items = [
        OrderItem(
            item_id=OrderItemId(item.id),
            menu_item_id=MenuItemId(item.menu_item_id) if item.menu_item_id else None,
            name=item.name,
            unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
            quantity=item.quantity,
            line_total=Money(amount_cents=item.line_total_cents, currency=item.currency),
            notes=item.notes,
        )
        for item in model.items
    ]
    return Order(
        order_id=OrderId(model.id),
        tab_id=TabId(model.tab_id),
        restaurant_id=RestaurantId(model.restaurant_id),
        status=OrderStatus(model.status),
        items=items,
        total=Money(amount_cents=model.total_cents, currency=model.currency),
        waiter_id=WaiterId(model.waiter_id),
        waiter_name=model.waiter_name,
        created_at=aware(model.created_at),
        updated_at=aware(model.updated_at),
        notes=model.notes,
    )


def order_to_model(order: Order) -> OrderModel:
    model = OrderModel(
        id=str(order.order_id),
        restaurant_id=str(order.restaurant_id),
        tab_id=str(order.tab_id),
        status=order.status.value,
        total_cents=order.total.amount_cents,
        currency=order.total.currency,
        waiter_id=str(order.waiter_id),
        waiter_name=order.waiter_name,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
    model.items = [
        OrderItemModel(
            id=str(item.item_id),
            order_id=str(order.order_id),
            position=position,
            menu_item_id=str(item.menu_item_id) if item.menu_item_id else None,
            name=item.name,
            quantity=item.quantity,
            unit_price_cents=item.unit_price.amount_cents,
            currency=item.unit_price.currency,
            line_total_cents=item.line_total.amount_cents,
            notes=item.notes,
        )
        for position, item in enumerate(order.items)
    ]
    return model


def encode_cursor(created_at: datetime, row_id: str) -> str:
    payload = f"{created_at.isoformat()}|{row_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created_at_raw, row_id = raw.split("|", 1)
        return aware(datetime.fromisoformat(created_at_raw)), row_id
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc
