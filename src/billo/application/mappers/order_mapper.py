from __future__ import annotations

from billo.application.dto.responses import OrderItemResponse, OrderResponse
from billo.application.mappers.money_mapper import to_money_response
from billo.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        tabId=str(order.tab_id),
        restaurantId=str(order.restaurant_id),
        status=order.status.value,
        items=[
            OrderItemResponse(
                itemId=str(item.item_id),
                menuItemId=str(item.menu_item_id) if item.menu_item_id else None,
                name=item.name,
                quantity=item.quantity,
                unitPrice=to_money_response(item.unit_price),
                lineTotal=to_money_response(item.line_total),
                notes=item.notes,
            )
            for item in order.items
        ],
        total=to_money_response(order.total),
        waiterId=str(order.waiter_id),
        waiterName=order.waiter_name,
        notes=order.notes,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )
