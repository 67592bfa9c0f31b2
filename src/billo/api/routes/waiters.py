from __future__ import annotations

from fastapi import APIRouter, Response, status

from billo.api.tracing import current_trace_context
from billo.application.dto.requests import CreateWaiterRequest, WaiterLoginRequest
from billo.application.dto.responses import WaiterListResponse, WaiterResponse
from billo.application.use_cases.waiters import CreateWaiter, DeleteWaiter, ListWaiters, WaiterLogin
from billo.domain.common.ids import RestaurantId, WaiterId
from billo.infrastructure.db.repositories.staff_repo import (
    SqlAlchemyRestaurantRepository,
    SqlAlchemyWaiterRepository,
)
from billo.infrastructure.messaging.redis_publisher import RedisEventPublisher

router = APIRouter()


def _create_waiter_use_case() -> CreateWaiter:
    return CreateWaiter(
        waiter_repository=SqlAlchemyWaiterRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
        publisher=RedisEventPublisher(),
    )


def _list_waiters_use_case() -> ListWaiters:
    return ListWaiters(
        waiter_repository=SqlAlchemyWaiterRepository(),
        restaurant_repository=SqlAlchemyRestaurantRepository(),
    )


def _delete_waiter_use_case() -> DeleteWaiter:
    return DeleteWaiter(
        waiter_repository=SqlAlchemyWaiterRepository(),
        publisher=RedisEventPublisher(),
    )


def _waiter_login_use_case() -> WaiterLogin:
    return WaiterLogin(waiter_repository=SqlAlchemyWaiterRepository())


@router.post(
    "/v1/restaurants/{restaurant_id}/waiters",
    response_model=WaiterResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_waiter(restaurant_id: str, request_dto: CreateWaiterRequest) -> WaiterResponse:
    return _create_waiter_use_case().execute(
        restaurant_id=RestaurantId(restaurant_id),
        request_dto=request_dto,
        trace_ctx=current_trace_context(),
    )


@router.get("/v1/restaurants/{restaurant_id}/waiters", response_model=WaiterListResponse)
def list_waiters(restaurant_id: str) -> WaiterListResponse:
    return _list_waiters_use_case().execute(RestaurantId(restaurant_id))


@router.post("/v1/restaurants/{restaurant_id}/waiters/login", response_model=WaiterResponse)
def waiter_login(restaurant_id: str, request_dto: WaiterLoginRequest) -> WaiterResponse:
    return _waiter_login_use_case().execute(RestaurantId(restaurant_id), request_dto)


@router.delete("/v1/waiters/{waiter_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_waiter(waiter_id: str) -> Response:
    _delete_waiter_use_case().execute(WaiterId(waiter_id), trace_ctx=current_trace_context())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
