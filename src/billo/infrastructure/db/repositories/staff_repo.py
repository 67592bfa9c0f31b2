from __future__ import annotations

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import IntegrityError

from billo.application.ports.repositories import (
    DuplicateRowError,
    RestaurantRepository,
    WaiterRepository,
)
from billo.domain.common.ids import RestaurantId, WaiterId
from billo.domain.restaurant.entities import Restaurant
from billo.domain.waiter.entities import Waiter
from billo.infrastructure.db.models.menu import RestaurantModel
from billo.infrastructure.db.models.waiter import WaiterModel
from billo.infrastructure.db.repositories.records import restaurant_to_domain
from billo.infrastructure.db.session import get_engine, transaction


class SqlAlchemyRestaurantRepository(RestaurantRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, restaurant: Restaurant) -> None:
        with transaction(self._engine) as session:
            session.add(
                RestaurantModel(
                    id=str(restaurant.restaurant_id),
                    owner_id=restaurant.owner_id,
                    name=restaurant.name,
                    currency=restaurant.currency,
                    timezone=restaurant.timezone,
                    daily_tab_counter=restaurant.daily_tab_counter,
                    last_tab_reset=restaurant.last_tab_reset,
                )
            )

    def get(self, restaurant_id: RestaurantId) -> Restaurant | None:
        with transaction(self._engine) as session:
            model = session.get(RestaurantModel, str(restaurant_id))
            return restaurant_to_domain(model) if model is not None else None

    def get_by_owner(self, owner_id: str) -> Restaurant | None:
        statement = (
            select(RestaurantModel)
            .where(RestaurantModel.owner_id == owner_id)
            .order_by(RestaurantModel.created_at, RestaurantModel.id)
            .limit(1)
        )
        with transaction(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            return restaurant_to_domain(model) if model is not None else None


class SqlAlchemyWaiterRepository(WaiterRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, waiter: Waiter) -> None:
        try:
            with transaction(self._engine) as session:
                session.add(
                    WaiterModel(
                        id=str(waiter.waiter_id),
                        restaurant_id=str(waiter.restaurant_id),
                        name=waiter.name,
                        pin=waiter.pin,
                    )
                )
        except IntegrityError as exc:
            # A concurrent create took the PIN between the check and the insert.
            if self._find_by_pin(waiter.restaurant_id, waiter.pin) is None:
                raise
            raise DuplicateRowError("waiter", "pin") from exc

    def get(self, waiter_id: WaiterId) -> Waiter | None:
        with transaction(self._engine) as session:
            model = session.get(WaiterModel, str(waiter_id))
            return self._to_domain(model) if model is not None else None

    def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Waiter]:
        statement = (
            select(WaiterModel)
            .where(WaiterModel.restaurant_id == str(restaurant_id))
            .order_by(WaiterModel.name, WaiterModel.id)
        )
        with transaction(self._engine) as session:
            return [self._to_domain(model) for model in session.execute(statement).scalars()]

    def get_by_pin(self, restaurant_id: RestaurantId, pin: str) -> Waiter | None:
        return self._find_by_pin(restaurant_id, pin)

    def _find_by_pin(self, restaurant_id: RestaurantId, pin: str) -> Waiter | None:
        statement = select(WaiterModel).where(
            WaiterModel.restaurant_id == str(restaurant_id),
            WaiterModel.pin == pin,
        )
        with transaction(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def delete(self, waiter_id: WaiterId) -> bool:
        with transaction(self._engine) as session:
            result = session.execute(delete(WaiterModel).where(WaiterModel.id == str(waiter_id)))
            return result.rowcount == 1

    def _to_domain(self, model: WaiterModel) -> Waiter:
        return Waiter(
            waiter_id=WaiterId(model.id),
            restaurant_id=RestaurantId(model.restaurant_id),
            name=model.name,
            pin=model.pin,
        )
