from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from billo.domain.common.money import Money
from billo.domain.order.entities import Order


@dataclass(frozen=True)
class TabAggregates:
    total: Money
    order_count: int
    item_count: int


def compute_aggregates(orders: Iterable[Order], currency: str) -> TabAggregates:
    """Derive tab aggregates from its full order history.

    Every order counts toward ``order_count``; cancelled orders are left out
    of ``total`` and ``item_count``.
    """
    total_cents = 0
    order_count = 0
    item_count = 0
    for order in orders:
        order_count += 1
        if not order.counts_toward_total:
            continue
        if order.total.currency != currency:
            raise ValueError(
                f"order {order.order_id} currency {order.total.currency} != tab currency {currency}"
            )
        total_cents += order.total.amount_cents
        item_count += order.item_count
    return TabAggregates(
        total=Money(amount_cents=total_cents, currency=currency),
        order_count=order_count,
        item_count=item_count,
    )
