from __future__ import annotations

from billo.application.dto.responses import TabAggregatesResponse, TabResponse
from billo.application.mappers.money_mapper import to_money_response
from billo.domain.tab.aggregates import TabAggregates
from billo.domain.tab.entities import Tab


def to_tab_response(tab: Tab) -> TabResponse:
    return TabResponse(
        tabId=str(tab.tab_id),
        restaurantId=str(tab.restaurant_id),
        referenceNumber=tab.reference_number,
        referenceDate=tab.reference_date,
        status=tab.status.value,
        waiterId=str(tab.waiter_id) if tab.waiter_id else None,
        waiterName=tab.waiter_name,
        customerName=tab.customer_name,
        tableNumber=tab.table_number,
        total=to_money_response(tab.total),
        orderCount=tab.order_count,
        itemCount=tab.item_count,
        version=tab.version,
        createdAt=tab.created_at,
        updatedAt=tab.updated_at,
    )


def to_aggregates_response(aggregates: TabAggregates) -> TabAggregatesResponse:
    return TabAggregatesResponse(
        total=to_money_response(aggregates.total),
        orderCount=aggregates.order_count,
        itemCount=aggregates.item_count,
    )
