from __future__ import annotations

from typing import Any

from billo.application.mappers.event_envelope import MENU_UPDATED, WAITER_UPDATED


def restaurant_tabs_topic(restaurant_id: str) -> str:
    return f"restaurant:{restaurant_id}:tabs"


def tab_topic(tab_id: str) -> str:
    return f"tab:{tab_id}"


def tab_orders_topic(tab_id: str) -> str:
    return f"tab:{tab_id}:orders"


def menu_topic(restaurant_id: str) -> str:
    return f"restaurant:{restaurant_id}:menu"


def waiters_topic(restaurant_id: str) -> str:
    return f"restaurant:{restaurant_id}:waiters"


def topics_for_event(envelope: dict[str, Any]) -> list[str]:
    """Map an event envelope to the projection topics it invalidates."""
    restaurant_id = envelope.get("restaurant_id")
    event_type = envelope.get("event_type") or ""
    payload = envelope.get("payload")
    if not restaurant_id or not isinstance(payload, dict):
        return []

    if event_type == MENU_UPDATED:
        return [menu_topic(restaurant_id)]
    if event_type == WAITER_UPDATED:
        return [waiters_topic(restaurant_id)]

    if event_type.startswith("tab."):
        tab_id = (payload.get("tab") or {}).get("tabId")
        topics = [restaurant_tabs_topic(restaurant_id)]
        if tab_id:
            topics.append(tab_topic(tab_id))
        return topics

    if event_type.startswith("order."):
        tab_id = (payload.get("order") or {}).get("tabId")
        topics = [restaurant_tabs_topic(restaurant_id)]
        if tab_id:
            topics.extend([tab_topic(tab_id), tab_orders_topic(tab_id)])
        return topics

    return []
