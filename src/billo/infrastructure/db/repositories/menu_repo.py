from __future__ import annotations

from sqlalchemy import Engine, delete, select

from billo.application.ports.repositories import MenuRepository
from billo.domain.common.ids import MenuItemId, RestaurantId
from billo.domain.common.money import Money
from billo.domain.menu.entities import MenuCategory, MenuItem
from billo.infrastructure.db.models.menu import MenuItemModel
from billo.infrastructure.db.session import get_engine, transaction


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[MenuItem]:
        statement = (
            select(MenuItemModel)
            .where(MenuItemModel.restaurant_id == str(restaurant_id))
            .order_by(MenuItemModel.category, MenuItemModel.name, MenuItemModel.id)
        )
        with transaction(self._engine) as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars()]

    def get(self, item_id: MenuItemId) -> MenuItem | None:
        with transaction(self._engine) as session:
            model = session.get(MenuItemModel, str(item_id))
            return self._to_domain(model) if model is not None else None

    def get_many(self, item_ids: list[MenuItemId]) -> dict[MenuItemId, MenuItem]:
        if not item_ids:
            return {}
        statement = select(MenuItemModel).where(
            MenuItemModel.id.in_(sorted({str(item_id) for item_id in item_ids}))
        )
        with transaction(self._engine) as session:
            items = [self._to_domain(model) for model in session.execute(statement).scalars()]
        return {item.item_id: item for item in items}

    def add(self, item: MenuItem) -> None:
        with transaction(self._engine) as session:
            model = MenuItemModel(id=str(item.item_id), restaurant_id=str(item.restaurant_id))
            self._apply(model, item)
            session.add(model)

    def update(self, item: MenuItem) -> None:
        with transaction(self._engine) as session:
            model = session.get(MenuItemModel, str(item.item_id))
            if model is None:
                return
            self._apply(model, item)

    def delete(self, item_id: MenuItemId) -> bool:
        with transaction(self._engine) as session:
            result = session.execute(delete(MenuItemModel).where(MenuItemModel.id == str(item_id)))
            return result.rowcount == 1

    def _apply(self, model: MenuItemModel, item: MenuItem) -> None:
        model.name = item.name
        model.description = item.description
        model.price_cents = item.price.amount_cents
        model.currency = item.price.currency
        model.category = item.category.value
        model.is_available = item.is_available
        model.preparation_minutes = item.preparation_minutes

    def _to_domain(self, model: MenuItemModel) -> MenuItem:
        return MenuItem(
            item_id=MenuItemId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            name=model.name,
            description=model.description,
            price=Money(amount_cents=model.price_cents, currency=model.currency),
            category=MenuCategory(model.category),
            is_available=model.is_available,
            preparation_minutes=model.preparation_minutes,
        )
