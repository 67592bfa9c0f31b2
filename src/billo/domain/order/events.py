from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from billo.domain.order.entities import Order, OrderStatus
from billo.domain.tab.entities import Tab


@dataclass(frozen=True)
class OrderAppended:
    order: Order
    tab: Tab
    activated: bool
    occurred_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order: Order
    tab: Tab
    from_status: OrderStatus
    occurred_at: datetime
