from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from billo.application.projections.hub import (
    Loader,
    ProjectionHub,
    ProjectionSnapshot,
    threaded_loader,
)
from billo.application.projections.topics import (
    menu_topic,
    restaurant_tabs_topic,
    tab_orders_topic,
    tab_topic,
    waiters_topic,
)
from billo.application.use_cases.get_menu import GetMenu
from billo.application.use_cases.get_tab import GetTab
from billo.application.use_cases.list_tabs import ListTabs
from billo.application.use_cases.tab_orders import ListTabOrders
from billo.application.use_cases.waiters import ListWaiters
from billo.domain.common.ids import RestaurantId, TabId
from billo.infrastructure.cache.cache_store import RedisCacheStore
from billo.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from billo.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from billo.infrastructure.db.repositories.staff_repo import (
    SqlAlchemyRestaurantRepository,
    SqlAlchemyWaiterRepository,
)
from billo.infrastructure.db.repositories.tab_repo import SqlAlchemyTabRepository

router = APIRouter()
logger = logging.getLogger(__name__)


def _dump(models: Sequence[BaseModel]) -> list[dict[str, Any]]:
    return [model.model_dump(mode="json") for model in models]


def _snapshot_message(snapshot: ProjectionSnapshot) -> dict[str, Any]:
    return {"topic": snapshot.topic, "items": snapshot.items, "error": snapshot.error}


async def _serve(websocket: WebSocket, topic: str, loaders: Sequence[Loader]) -> None:
    """Stream snapshots of one topic until the client goes away."""
    hub: ProjectionHub = websocket.app.state.projection_hub
    await websocket.accept()

    async def send(snapshot: ProjectionSnapshot) -> None:
        await websocket.send_json(_snapshot_message(snapshot))

    subscription = await hub.subscribe(topic, loaders, send)
    logger.info("ws_client_connected", extra={"topic": topic})
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("ws_client_disconnected", extra={"topic": topic})
    except Exception:
        logger.exception("ws_connection_error", extra={"topic": topic})
    finally:
        subscription.cancel()


def _tabs_loader(restaurant_id: str, status: str) -> Callable[[], list[Any]]:
    def load() -> list[Any]:
        use_case = ListTabs(
            tab_repository=SqlAlchemyTabRepository(),
            restaurant_repository=SqlAlchemyRestaurantRepository(),
        )
        return _dump(use_case.execute(RestaurantId(restaurant_id), status=status, limit=200).tabs)

    return load


def _tab_loader(tab_id: str) -> Callable[[], list[Any]]:
    def load() -> list[Any]:
        return _dump([GetTab(tab_repository=SqlAlchemyTabRepository()).execute(TabId(tab_id))])

    return load


def _tab_orders_loader(tab_id: str) -> Callable[[], list[Any]]:
    def load() -> list[Any]:
        use_case = ListTabOrders(order_repository=SqlAlchemyOrderRepository())
        return _dump(use_case.execute(TabId(tab_id)))

    return load


def _menu_loader(restaurant_id: str) -> Callable[[], list[Any]]:
    def load() -> list[Any]:
        use_case = GetMenu(
            repository=SqlAlchemyMenuRepository(),
            restaurant_repository=SqlAlchemyRestaurantRepository(),
            cache=RedisCacheStore(),
        )
        return _dump(use_case.execute(RestaurantId(restaurant_id)).items)

    return load


def _waiters_loader(restaurant_id: str) -> Callable[[], list[Any]]:
    def load() -> list[Any]:
        use_case = ListWaiters(
            waiter_repository=SqlAlchemyWaiterRepository(),
            restaurant_repository=SqlAlchemyRestaurantRepository(),
        )
        return _dump(use_case.execute(RestaurantId(restaurant_id)).waiters)

    return load


@router.websocket("/ws/restaurants/{restaurant_id}/tabs")
async def restaurant_tabs_feed(websocket: WebSocket, restaurant_id: str) -> None:
    status = websocket.query_params.get("status", "OPEN")
    await _serve(
        websocket,
        restaurant_tabs_topic(restaurant_id),
        [threaded_loader(_tabs_loader(restaurant_id, status))],
    )


@router.websocket("/ws/tabs/{tab_id}")
async def tab_feed(websocket: WebSocket, tab_id: str) -> None:
    await _serve(websocket, tab_topic(tab_id), [threaded_loader(_tab_loader(tab_id))])


@router.websocket("/ws/tabs/{tab_id}/orders")
async def tab_orders_feed(websocket: WebSocket, tab_id: str) -> None:
    await _serve(websocket, tab_orders_topic(tab_id), [threaded_loader(_tab_orders_loader(tab_id))])


@router.websocket("/ws/restaurants/{restaurant_id}/menu")
async def menu_feed(websocket: WebSocket, restaurant_id: str) -> None:
    await _serve(websocket, menu_topic(restaurant_id), [threaded_loader(_menu_loader(restaurant_id))])


@router.websocket("/ws/restaurants/{restaurant_id}/waiters")
async def waiters_feed(websocket: WebSocket, restaurant_id: str) -> None:
    await _serve(websocket, waiters_topic(restaurant_id), [threaded_loader(_waiters_loader(restaurant_id))])
