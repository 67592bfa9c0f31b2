from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class RestaurantResponse(BaseModel):
    restaurantId: str
    ownerId: str
    name: str
    currency: str
    timezone: str
    dailyTabCounter: int
    lastTabReset: date | None = None


class TabResponse(BaseModel):
    tabId: str
    restaurantId: str
    referenceNumber: str
    referenceDate: date
    status: str
    waiterId: str | None = None
    waiterName: str | None = None
    customerName: str | None = None
    tableNumber: str | None = None
    total: MoneyResponse
    orderCount: int
    itemCount: int
    version: int
    createdAt: datetime
    updatedAt: datetime


class TabListResponse(BaseModel):
    tabs: list[TabResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class TabAggregatesResponse(BaseModel):
    total: MoneyResponse
    orderCount: int
    itemCount: int


class ReconcileTabResponse(BaseModel):
    tab: TabResponse
    drifted: bool
    previous: TabAggregatesResponse


class OrderItemResponse(BaseModel):
    itemId: str
    menuItemId: str | None = None
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse
    notes: str | None = None


class OrderResponse(BaseModel):
    orderId: str
    tabId: str
    restaurantId: str
    status: str
    items: list[OrderItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    waiterId: str
    waiterName: str
    notes: str | None = None
    createdAt: datetime
    updatedAt: datetime


class AppendOrderResponse(BaseModel):
    order: OrderResponse
    tab: TabResponse
    activated: bool


class OrderStatusResponse(BaseModel):
    order: OrderResponse
    tab: TabResponse


class TabOrdersResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    nextCursor: str | None = None


class MenuItemResponse(BaseModel):
    itemId: str
    restaurantId: str
    name: str
    description: str | None = None
    price: MoneyResponse
    category: str
    isAvailable: bool
    preparationMinutes: int


class MenuResponse(BaseModel):
    restaurantId: str
    categories: list[str] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)


class WaiterResponse(BaseModel):
    waiterId: str
    restaurantId: str
    name: str


class WaiterListResponse(BaseModel):
    waiters: list[WaiterResponse] = Field(default_factory=list)
