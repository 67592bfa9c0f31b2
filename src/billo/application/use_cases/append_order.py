from __future__ import annotations

import logging
from uuid import uuid4

from billo.application.dto.requests import AppendOrderItemRequest, AppendOrderRequest
from billo.application.dto.responses import AppendOrderResponse
from billo.application.errors import (
    MenuItemNotFoundError,
    TabNotFoundError,
    ValidationError,
    WaiterNotFoundError,
)
from billo.application.mappers.event_envelope import ORDER_APPENDED, serialize_order_event
from billo.application.mappers.order_mapper import to_order_response
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.metrics.tab_lifecycle import record_order_appended, record_tab_transition
from billo.application.ports.publisher import EventPublisher
from billo.application.ports.repositories import (
    MenuRepository,
    TabRepository,
    WaiterRepository,
)
from billo.application.use_cases.context import Clock, TraceContext, utc_now
from billo.application.use_cases.publishing import publish_event
from billo.application.use_cases.translate import domain_errors
from billo.domain.common.ids import MenuItemId, OrderId, OrderItemId, TabId, WaiterId
from billo.domain.common.money import Money
from billo.domain.menu.entities import MenuItem
from billo.domain.order.entities import Order, OrderItem, create_order_item, create_pending_order
from billo.domain.order.events import OrderAppended
from billo.domain.tab.entities import Tab
from billo.domain.tab.transitions import TabStatus
from billo.domain.waiter.entities import Waiter

logger = logging.getLogger(__name__)


class MenuItemUnavailableError(ValidationError):
    code = "MENU_ITEM_UNAVAILABLE"


class AppendOrder:
    """Create an order on a tab and fold it into the tab's aggregates.

    Both writes happen in one transaction with the tab row locked. The first
    order on an inactive tab also activates it for the ordering waiter, so a
    waiter id is mandatory in that case; later orders default to the tab's
    waiter.
    """

    def __init__(
        self,
        tab_repository: TabRepository,
        menu_repository: MenuRepository,
        waiter_repository: WaiterRepository,
        publisher: EventPublisher,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._menu_repository = menu_repository
        self._waiter_repository = waiter_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        tab_id: TabId,
        request_dto: AppendOrderRequest,
        trace_ctx: TraceContext,
    ) -> AppendOrderResponse:
        if not request_dto.items:
            raise ValidationError("order must contain at least one item", code="EMPTY_ORDER")

        # Restaurant and currency are immutable; items are priced from an
        # unlocked read.
        snapshot = self._tab_repository.get(tab_id)
        if snapshot is None:
            raise TabNotFoundError(f"tab {tab_id} not found", details={"tabId": str(tab_id)})

        items = self._build_items(snapshot, request_dto.items)
        waiter = self._resolve_waiter(snapshot, request_dto.waiter_id)
        now = self._clock()
        order_id = OrderId(f"ord_{uuid4().hex[:12]}")

        def decide(tab: Tab) -> tuple[Tab, Order]:
            tab.ensure_open_for_orders()
            if waiter is not None:
                waiter_id, waiter_name = waiter.waiter_id, waiter.name
            elif tab.status == TabStatus.INACTIVE or tab.waiter_id is None:
                raise ValidationError(
                    f"waiterId is required for the first order of inactive tab {tab.tab_id}",
                    code="WAITER_REQUIRED",
                )
            else:
                waiter_id, waiter_name = tab.waiter_id, tab.waiter_name or ""

            order = create_pending_order(
                order_id=order_id,
                tab_id=tab.tab_id,
                restaurant_id=tab.restaurant_id,
                items=items,
                waiter_id=waiter_id,
                waiter_name=waiter_name,
                now=now,
                notes=request_dto.notes,
            )
            updated, _ = tab.append_order(order, now)
            return updated, order

        with domain_errors():
            before, tab, order = self._tab_repository.append_order(tab_id, decide)

        activated = before.status == TabStatus.INACTIVE and tab.status == TabStatus.ACTIVE
        if activated:
            record_tab_transition(before.status, tab.status)
        record_order_appended(order)
        logger.info(
            "order_appended",
            extra={
                "order_id": str(order.order_id),
                "tab_id": str(tab_id),
                "restaurant_id": str(tab.restaurant_id),
            },
        )
        publish_event(
            self._publisher,
            restaurant_id=str(tab.restaurant_id),
            event_type=ORDER_APPENDED,
            message=serialize_order_event(
                OrderAppended(order=order, tab=tab, activated=activated, occurred_at=now),
                trace_id=trace_ctx.trace_id,
                request_id=trace_ctx.request_id,
            ),
        )
        return AppendOrderResponse(
            order=to_order_response(order),
            tab=to_tab_response(tab),
            activated=activated,
        )

    def _build_items(self, tab: Tab, requested: list[AppendOrderItemRequest]) -> list[OrderItem]:
        menu_ids = [MenuItemId(line.menu_item_id) for line in requested if line.menu_item_id]
        menu_items = self._menu_repository.get_many(menu_ids) if menu_ids else {}

        items: list[OrderItem] = []
        for line in requested:
            if line.quantity < 1:
                raise ValidationError("quantity must be greater than 0", code="INVALID_QUANTITY")
            if line.menu_item_id:
                name, unit_price = _from_menu(tab, line.menu_item_id, menu_items)
            else:
                name, unit_price = _manual_item(tab, line)
            try:
                items.append(
                    create_order_item(
                        item_id=OrderItemId(f"oit_{uuid4().hex[:12]}"),
                        menu_item_id=MenuItemId(line.menu_item_id) if line.menu_item_id else None,
                        name=name,
                        unit_price=unit_price,
                        quantity=line.quantity,
                        notes=line.notes,
                    )
                )
            except ValueError as exc:
                raise ValidationError(str(exc), code="INVALID_ORDER_ITEM") from exc
        return items

    def _resolve_waiter(self, tab: Tab, waiter_id: str | None) -> Waiter | None:
        if not waiter_id:
            return None
        waiter = self._waiter_repository.get(WaiterId(waiter_id))
        if waiter is None or not waiter.works_at(tab.restaurant_id):
            raise WaiterNotFoundError(
                f"waiter {waiter_id} not found for restaurant {tab.restaurant_id}",
                details={"waiterId": waiter_id},
            )
        return waiter


def _from_menu(
    tab: Tab,
    menu_item_id: str,
    menu_items: dict[MenuItemId, MenuItem],
) -> tuple[str, Money]:
    menu_item = menu_items.get(MenuItemId(menu_item_id))
    if menu_item is None or menu_item.restaurant_id != tab.restaurant_id:
        raise MenuItemNotFoundError(
            f"menu item {menu_item_id} does not exist",
            details={"menuItemId": menu_item_id},
        )
    if not menu_item.is_available:
        raise MenuItemUnavailableError(
            f"menu item {menu_item_id} is unavailable",
            details={"menuItemId": menu_item_id},
        )
    if menu_item.price.currency != tab.currency:
        raise ValidationError(
            f"menu item {menu_item_id} is priced in {menu_item.price.currency}, "
            f"tab is in {tab.currency}",
            code="CURRENCY_MISMATCH",
        )
    return menu_item.name, menu_item.price


def _manual_item(tab: Tab, line: AppendOrderItemRequest) -> tuple[str, Money]:
    if not line.name or not line.name.strip():
        raise ValidationError("manual items need a name", code="INVALID_ORDER_ITEM")
    if line.price is None:
        raise ValidationError("manual items need a price", code="INVALID_ORDER_ITEM")
    try:
        price = Money.from_decimal(line.price, tab.currency)
    except ValueError as exc:
        raise ValidationError("price must be greater than 0", code="INVALID_PRICE") from exc
    if price.amount_cents <= 0:
        raise ValidationError("price must be greater than 0", code="INVALID_PRICE")
    return line.name.strip(), price
