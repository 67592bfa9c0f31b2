from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from billo.application.mappers.order_mapper import to_order_response
from billo.application.mappers.tab_mapper import to_aggregates_response, to_tab_response
from billo.domain.order.events import OrderAppended, OrderStatusChanged
from billo.domain.tab.events import (
    TabActivated,
    TabCreated,
    TabDeleted,
    TabReconciled,
    TabStatusChanged,
)

TAB_CREATED = "tab.created"
TAB_ACTIVATED = "tab.activated"
TAB_STATUS_CHANGED = "tab.status_changed"
TAB_RECONCILED = "tab.reconciled"
TAB_DELETED = "tab.deleted"
ORDER_APPENDED = "order.appended"
ORDER_STATUS_CHANGED = "order.status_changed"
MENU_UPDATED = "menu.updated"
WAITER_UPDATED = "waiter.updated"


def event_channel(restaurant_id: str) -> str:
    return f"events:{restaurant_id}"


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    restaurant_id: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "restaurant_id": restaurant_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_tab_event(
    event: TabCreated | TabActivated | TabStatusChanged | TabReconciled | TabDeleted,
    *,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload: dict[str, Any] = {"tab": to_tab_response(event.tab).model_dump(mode="json")}
    if isinstance(event, TabCreated):
        event_type = TAB_CREATED
        payload["initiator"] = event.initiator
    elif isinstance(event, TabActivated):
        event_type = TAB_ACTIVATED
    elif isinstance(event, TabStatusChanged):
        event_type = TAB_STATUS_CHANGED
        payload["fromStatus"] = event.from_status.value
    elif isinstance(event, TabReconciled):
        event_type = TAB_RECONCILED
        payload["drifted"] = event.drifted
        payload["previous"] = to_aggregates_response(event.previous).model_dump(mode="json")
    else:
        event_type = TAB_DELETED

    return _serialize_event(
        event_type=event_type,
        occurred_at=event.occurred_at,
        restaurant_id=str(event.tab.restaurant_id),
        payload=payload,
        trace_id=trace_id,
        request_id=request_id,
    )


def serialize_order_event(
    event: OrderAppended | OrderStatusChanged,
    *,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload: dict[str, Any] = {
        "order": to_order_response(event.order).model_dump(mode="json"),
        "tab": to_tab_response(event.tab).model_dump(mode="json"),
    }
    if isinstance(event, OrderAppended):
        event_type = ORDER_APPENDED
        payload["activated"] = event.activated
    else:
        event_type = ORDER_STATUS_CHANGED
        payload["fromStatus"] = event.from_status.value

    return _serialize_event(
        event_type=event_type,
        occurred_at=event.occurred_at,
        restaurant_id=str(event.order.restaurant_id),
        payload=payload,
        trace_id=trace_id,
        request_id=request_id,
    )


def serialize_catalog_event(
    *,
    event_type: str,
    occurred_at: datetime,
    restaurant_id: str,
    entity_id: str,
    action: str,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    """Menu and waiter changes only carry what changed; subscribers reload."""
    key = "itemId" if event_type == MENU_UPDATED else "waiterId"
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        restaurant_id=restaurant_id,
        payload={key: entity_id, "action": action},
        trace_id=trace_id,
        request_id=request_id,
    )
