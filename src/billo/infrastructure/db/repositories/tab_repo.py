from __future__ import annotations

from dataclasses import replace
from datetime import date

from sqlalchemy import Engine, and_, func, or_, select
from sqlalchemy.orm import Session, selectinload

from billo.application.ports.repositories import (
    BuildTab,
    CheckDelete,
    DecideAppend,
    DecideOrderStatus,
    DecideReconcile,
    DecideTab,
    RowNotFoundError,
    TabRepository,
)
from billo.domain.common.ids import OrderId, RestaurantId, TabId
from billo.domain.order.entities import Order
from billo.domain.tab.entities import Tab
from billo.domain.tab.transitions import TabStatus
from billo.infrastructure.db.models.menu import RestaurantModel
from billo.infrastructure.db.models.order import OrderModel
from billo.infrastructure.db.models.tab import TabModel
from billo.infrastructure.db.repositories.records import (
    apply_tab,
    decode_cursor,
    encode_cursor,
    order_to_domain,
    order_to_model,
    restaurant_to_domain,
    tab_to_domain,
    tab_to_model,
)
from billo.infrastructure.db.session import get_engine, transaction


class SqlAlchemyTabRepository(TabRepository):
    """Tab persistence.

    Every write locks the rows it reads with ``SELECT ... FOR UPDATE`` and runs
    the caller's decide function inside the same transaction, so concurrent
    writers to one tab (or one restaurant's counter) are serialized by the
    database. Lock order is always tab before order.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def create(self, restaurant_id: RestaurantId, build: BuildTab) -> Tab:
        statement = (
            select(RestaurantModel)
            .where(RestaurantModel.id == str(restaurant_id))
            .with_for_update()
        )
        with transaction(self._engine) as session:
            restaurant_model = session.execute(statement).scalar_one_or_none()
            if restaurant_model is None:
                raise RowNotFoundError("restaurant", str(restaurant_id))

            restaurant, tab = build(restaurant_to_domain(restaurant_model))
            restaurant_model.daily_tab_counter = restaurant.daily_tab_counter
            restaurant_model.last_tab_reset = restaurant.last_tab_reset
            session.add(tab_to_model(tab))
        return tab

    def get(self, tab_id: TabId) -> Tab | None:
        with transaction(self._engine) as session:
            model = session.get(TabModel, str(tab_id))
            return tab_to_domain(model) if model is not None else None

    def get_by_reference(
        self,
        restaurant_id: RestaurantId,
        reference_number: str,
        reference_date: date,
    ) -> Tab | None:
        statement = select(TabModel).where(
            TabModel.restaurant_id == str(restaurant_id),
            TabModel.reference_date == reference_date,
            TabModel.reference_number == reference_number,
        )
        with transaction(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            return tab_to_domain(model) if model is not None else None

    def list_for_restaurant(
        self,
        restaurant_id: RestaurantId,
        statuses: frozenset[TabStatus] | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Tab], str | None]:
        statement = select(TabModel).where(TabModel.restaurant_id == str(restaurant_id))
        if statuses is not None:
            statement = statement.where(TabModel.status.in_(sorted(s.value for s in statuses)))

        cursor_parts = decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_created_at, cursor_tab_id = cursor_parts
            statement = statement.where(
                or_(
                    TabModel.created_at < cursor_created_at,
                    and_(TabModel.created_at == cursor_created_at, TabModel.id < cursor_tab_id),
                )
            )

        statement = statement.order_by(TabModel.created_at.desc(), TabModel.id.desc()).limit(
            limit + 1
        )

        with transaction(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            tabs = [tab_to_domain(model) for model in models[:limit]]

        next_cursor: str | None = None
        if len(models) > limit and tabs:
            last = tabs[-1]
            next_cursor = encode_cursor(last.created_at, str(last.tab_id))
        return tabs, next_cursor

    def mutate(self, tab_id: TabId, decide: DecideTab) -> tuple[Tab, Tab]:
        with transaction(self._engine) as session:
            model = self._lock_tab(session, tab_id)
            before = tab_to_domain(model)
            after = decide(before)
            if after != before:
                after = replace(after, version=before.version + 1)
                apply_tab(model, after)
        return before, after

    def append_order(self, tab_id: TabId, decide: DecideAppend) -> tuple[Tab, Tab, Order]:
        with transaction(self._engine) as session:
            model = self._lock_tab(session, tab_id)
            before = tab_to_domain(model)
            tab, order = decide(before)
            tab = replace(tab, version=before.version + 1)
            apply_tab(model, tab)
            session.add(order_to_model(order))
        return before, tab, order

    def update_order_status(
        self,
        order_id: OrderId,
        decide: DecideOrderStatus,
    ) -> tuple[Tab, Order, Order]:
        with transaction(self._engine) as session:
            tab_id = session.execute(
                select(OrderModel.tab_id).where(OrderModel.id == str(order_id))
            ).scalar_one_or_none()
            if tab_id is None:
                raise RowNotFoundError("order", str(order_id))

            tab_model = self._lock_tab(session, TabId(tab_id))
            order_model = session.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(OrderModel.id == str(order_id))
                .with_for_update()
            ).scalar_one()

            before = tab_to_domain(tab_model)
            previous = order_to_domain(order_model)
            tab, order = decide(before, previous)

            order_model.status = order.status.value
            order_model.updated_at = order.updated_at
            if tab != before:
                tab = replace(tab, version=before.version + 1)
                apply_tab(tab_model, tab)
        return tab, previous, order

    def reconcile(self, tab_id: TabId, decide: DecideReconcile) -> tuple[Tab, Tab]:
        with transaction(self._engine) as session:
            model = self._lock_tab(session, tab_id)
            before = tab_to_domain(model)
            order_models = session.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(OrderModel.tab_id == str(tab_id))
                .order_by(OrderModel.created_at, OrderModel.id)
            ).scalars()
            orders = [order_to_domain(order_model) for order_model in order_models]

            after = decide(before, orders)
            if after != before:
                after = replace(after, version=before.version + 1)
                apply_tab(model, after)
        return before, after

    def delete(self, tab_id: TabId, check: CheckDelete) -> Tab:
        with transaction(self._engine) as session:
            model = self._lock_tab(session, tab_id)
            tab = tab_to_domain(model)
            stored_orders = session.execute(
                select(func.count()).select_from(OrderModel).where(OrderModel.tab_id == str(tab_id))
            ).scalar_one()
            check(tab, int(stored_orders))
            session.delete(model)
        return tab

    def _lock_tab(self, session: Session, tab_id: TabId) -> TabModel:
        model = session.execute(
            select(TabModel).where(TabModel.id == str(tab_id)).with_for_update()
        ).scalar_one_or_none()
        if model is None:
            raise RowNotFoundError("tab", str(tab_id))
        return model
