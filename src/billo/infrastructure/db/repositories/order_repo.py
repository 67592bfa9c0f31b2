from __future__ import annotations

from sqlalchemy import Engine, and_, or_, select
from sqlalchemy.orm import selectinload

from billo.application.ports.repositories import OrderRepository
from billo.domain.common.ids import OrderId, TabId
from billo.domain.order.entities import Order, OrderStatus
from billo.infrastructure.db.models.order import OrderModel
from billo.infrastructure.db.repositories.records import (
    decode_cursor,
    encode_cursor,
    order_to_domain,
)
from billo.infrastructure.db.session import get_engine, transaction


class SqlAlchemyOrderRepository(OrderRepository):
    """Read side for orders; writes go through the tab repository."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        with transaction(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            return order_to_domain(model) if model is not None else None

    def list_for_tab(self, tab_id: TabId) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.tab_id == str(tab_id))
            .order_by(OrderModel.created_at, OrderModel.id)
        )
        with transaction(self._engine) as session:
            return [order_to_domain(model) for model in session.execute(statement).scalars()]

    def page_for_tab(
        self,
        tab_id: TabId,
        status: OrderStatus | None,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[Order], str | None]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.tab_id == str(tab_id))
        )
        if status is not None:
            statement = statement.where(OrderModel.status == status.value)

        cursor_parts = decode_cursor(cursor) if cursor else None
        if cursor_parts is not None:
            cursor_created_at, cursor_order_id = cursor_parts
            statement = statement.where(
                or_(
                    OrderModel.created_at < cursor_created_at,
                    and_(
                        OrderModel.created_at == cursor_created_at,
                        OrderModel.id < cursor_order_id,
                    ),
                )
            )

        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(
            limit + 1
        )

        with transaction(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            orders = [order_to_domain(model) for model in models[:limit]]

        next_cursor: str | None = None
        if len(models) > limit and orders:
            last = orders[-1]
            next_cursor = encode_cursor(last.created_at, str(last.order_id))
        return orders, next_cursor
