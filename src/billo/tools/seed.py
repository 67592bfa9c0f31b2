from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Table, inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from billo.infrastructure.db.models.menu import MenuItemModel, RestaurantModel
from billo.infrastructure.db.models.waiter import WaiterModel
from billo.infrastructure.db.session import get_engine
from billo.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger("billo.tools.seed")

DEMO_RESTAURANT: dict[str, Any] = {
    "id": "rst_demo",
    "owner_id": "own_demo",
    "name": "Bill-O Demo Bistro",
    "currency": "USD",
    "timezone": "UTC",
}

DEMO_WAITERS: list[dict[str, Any]] = [
    {"id": "wtr_demo_ana", "restaurant_id": "rst_demo", "name": "Ana", "pin": "1234"},
    {"id": "wtr_demo_ben", "restaurant_id": "rst_demo", "name": "Ben", "pin": "5678"},
]

DEMO_MENU: list[dict[str, Any]] = [
    {
        "id": "itm_demo_bruschetta",
        "name": "Bruschetta",
        "description": "Grilled bread, tomato, basil",
        "price_cents": 750,
        "category": "appetizers",
        "preparation_minutes": 8,
    },
    {
        "id": "itm_demo_margherita",
        "name": "Margherita Pizza",
        "description": "Tomato, mozzarella, basil",
        "price_cents": 1450,
        "category": "food",
        "preparation_minutes": 15,
    },
    {
        "id": "itm_demo_alfredo",
        "name": "Chicken Alfredo",
        "description": "Fettuccine, creamy parmesan sauce",
        "price_cents": 1690,
        "category": "food",
        "preparation_minutes": 18,
    },
    {
        "id": "itm_demo_lemonade",
        "name": "House Lemonade",
        "description": None,
        "price_cents": 450,
        "category": "drinks",
        "preparation_minutes": 2,
    },
    {
        "id": "itm_demo_tiramisu",
        "name": "Tiramisu",
        "description": "Espresso-soaked ladyfingers",
        "price_cents": 850,
        "category": "desserts",
        "preparation_minutes": 5,
        "is_available": False,
    },
]


def _upsert(session: Session, table: Table, row: dict[str, Any]) -> None:
    updates = {key: value for key, value in row.items() if key != "id"}
    session.execute(
        insert(table).values(**row).on_conflict_do_update(index_elements=[table.c.id], set_=updates)
    )


def main() -> None:
    configure_logging()
    engine = get_engine(timeout_seconds=2.0)
    inspector = inspect(engine)
    required_tables = {"restaurants", "waiters", "menu_items"}
    if not required_tables.issubset(set(inspector.get_table_names(schema="public"))):
        logger.warning("seed_skipped", extra={"reason": "schema missing, run alembic upgrade head"})
        return

    with Session(engine) as session:
        _upsert(session, RestaurantModel.__table__, DEMO_RESTAURANT)
        for waiter in DEMO_WAITERS:
            _upsert(session, WaiterModel.__table__, waiter)
        for item in DEMO_MENU:
            row = {
                "restaurant_id": DEMO_RESTAURANT["id"],
                "currency": DEMO_RESTAURANT["currency"],
                "is_available": True,
                **item,
            }
            _upsert(session, MenuItemModel.__table__, row)
        session.commit()

    logger.info("seed_complete", extra={"restaurant_id": DEMO_RESTAURANT["id"]})


if __name__ == "__main__":
    main()
