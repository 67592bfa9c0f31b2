from __future__ import annotations

from typing import NewType

RestaurantId = NewType("RestaurantId", str)
TabId = NewType("TabId", str)
OrderId = NewType("OrderId", str)
OrderItemId = NewType("OrderItemId", str)
MenuItemId = NewType("MenuItemId", str)
WaiterId = NewType("WaiterId", str)
