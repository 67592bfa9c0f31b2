from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class CreateRestaurantRequest(CamelBaseModel):
    name: str
    owner_id: str
    currency: str = "USD"
    timezone: str = "UTC"


class CreateTabRequest(CamelBaseModel):
    initiator: Literal["customer", "waiter"] = "customer"
    waiter_id: str | None = None
    customer_name: str | None = None
    table_number: str | None = None


class ActivateTabRequest(CamelBaseModel):
    waiter_id: str


class UpdateTabStatusRequest(CamelBaseModel):
    status: str


class AppendOrderItemRequest(CamelBaseModel):
    menu_item_id: str | None = None
    name: str | None = None
    price: Decimal | None = None
    quantity: int = 1
    notes: str | None = None


class AppendOrderRequest(CamelBaseModel):
    items: list[AppendOrderItemRequest] = Field(default_factory=list)
    waiter_id: str | None = None
    notes: str | None = None


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str


class CreateMenuItemRequest(CamelBaseModel):
    name: str
    description: str | None = None
    price: Decimal
    category: str = "food"
    is_available: bool = True
    preparation_minutes: int = 0


class UpdateMenuItemRequest(CamelBaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    category: str | None = None
    is_available: bool | None = None
    preparation_minutes: int | None = None


class CreateWaiterRequest(CamelBaseModel):
    name: str
    pin: str


class WaiterLoginRequest(CamelBaseModel):
    pin: str
