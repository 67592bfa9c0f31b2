from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, Response, status

from billo.api.tracing import current_trace_context
from billo.application.dto.requests import (
    ActivateTabRequest,
    CreateTabRequest,
    UpdateTabStatusRequest,
)
from billo.application.dto.responses import ReconcileTabResponse, TabListResponse, TabResponse
from billo.application.use_cases.create_tab import CreateTab
from billo.application.use_cases.get_tab import GetTab, GetTabByReference
from billo.application.use_cases.list_tabs import ListTabs
from billo.application.use_cases.reconcile_tab import ReconcileTab
from billo.application.use_cases.tab_lifecycle import ActivateTab, DeleteTab, UpdateTabStatus
from billo.domain.common.ids import RestaurantId, TabId
from billo.infrastructure.db.repositories.staff_repo import (
    SqlAlchemyRestaurantRepository,
    SqlAlchemyWaiterRepository,
)
from billo.infrastructure.db.repositories.tab_repo import SqlAlchemyTabRepository
from billo.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _create_tab_use_case() -> CreateTab:
    return CreateTab(
        tab_repository=SqlAlchemyTabRepository(),
        waiter_repository=SqlAlchemyWaiterRepository(),
        publisher=RedisEventPublisher(),
    )


def _list_tabs_use_case() -> ListTabs:
    return ListTabs(
        tab_repository=SqlAlchemyTabRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
    )


def _get_tab_by_reference_use_case() -> GetTabByReference:
    return GetTabByReference(
        tab_repository=SqlAlchemyTabRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
    )


def _get_tab_use_case() -> GetTab:
    return GetTab(tab_repository=SqlAlchemyTabRepository())


def _activate_tab_use_case() -> ActivateTab:
    return ActivateTab(
        tab_repository=SqlAlchemyTabRepository(),
        waiter_repository=SqlAlchemyWaiterRepository(),
        publisher=RedisEventPublisher(),
    )


def _update_tab_status_use_case() -> UpdateTabStatus:
    return UpdateTabStatus(
        tab_repository=SqlAlchemyTabRepository(),
        publisher=RedisEventPublisher(),
    )


def _delete_tab_use_case() -> DeleteTab:
    return DeleteTab(
        tab_repository=SqlAlchemyTabRepository(),
        publisher=RedisEventPublisher(),
    )


def _reconcile_tab_use_case() -> ReconcileTab:
    return ReconcileTab(
        tab_repository=SqlAlchemyTabRepository(),
        publisher=RedisEventPublisher(),
    )


@router.post(
    "/v1/restaurants/{restaurant_id}/tabs",
    response_model=TabResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_tab(restaurant_id: str, request_dto: CreateTabRequest) -> TabResponse:
    return _create_tab_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/restaurants/{restaurant_id}/tabs", response_model=TabListResponse)
def list_tabs(
    restaurant_id: str,
    status_filter: str = Query(default="ALL", alias="status"),
    limit: int = Query(default=50),
    cursor: str | None = Query(default=None),
) -> TabListResponse:
    return _list_tabs_use_case().execute(
        RestaurantId(restaurant_id),
        status=status_filter,
        limit=limit,
        cursor=cursor,
    )


@router.get(
    "/v1/restaurants/{restaurant_id}/tabs/by-reference/{reference_number}",
    response_model=TabResponse,
)
def get_tab_by_reference(
    restaurant_id: str,
    reference_number: str,
    reference_date: date | None = Query(default=None, alias="date"),
) -> TabResponse:
    return _get_tab_by_reference_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        reference_number=reference_number,
        reference_date=reference_date,
    )


@router.get("/v1/tabs/{tab_id}", response_model=TabResponse)
def get_tab(tab_id: str) -> TabResponse:
    return _get_tab_use_case().execute(TabId(tab_id))


@router.delete("/v1/tabs/{tab_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tab(tab_id: str) -> Response:
    _delete_tab_use_case().execute(TabId(tab_id), trace_ctx=current_trace_context())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/v1/tabs/{tab_id}/activate", response_model=TabResponse)
def activate_tab(tab_id: str, request_dto: ActivateTabRequest) -> TabResponse:
    return _activate_tab_use_case().execute(
        tab_id=TabId(tab_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.post("/v1/tabs/{tab_id}/status", response_model=TabResponse)
def update_tab_status(tab_id: str, request_dto: UpdateTabStatusRequest) -> TabResponse:
    return _update_tab_status_use_case().execute(
        tab_id=TabId(tab_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.post("/v1/tabs/{tab_id}/reconcile", response_model=ReconcileTabResponse)
def reconcile_tab(tab_id: str) -> ReconcileTabResponse:
    return _reconcile_tab_use_case().execute(TabId(tab_id), trace_ctx=current_trace_context())
