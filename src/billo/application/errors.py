from __future__ import annotations

from typing import Any


class BilloError(Exception):
    """Base for errors the API layer renders as structured responses.

    ``status_code`` and ``code`` are class defaults; concrete errors narrow the
    code, and ``details`` carries machine-readable context for clients.
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details = details or {}


class NotFoundError(BilloError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(BilloError):
    status_code = 400
    code = "VALIDATION_FAILED"


class StateError(BilloError):
    status_code = 409
    code = "INVALID_STATE"


class TransientError(BilloError):
    status_code = 503
    code = "UNAVAILABLE"


class StoreUnavailableError(TransientError):
    code = "STORE_UNAVAILABLE"


class RestaurantNotFoundError(NotFoundError):
    code = "RESTAURANT_NOT_FOUND"


class TabNotFoundError(NotFoundError):
    code = "TAB_NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class WaiterNotFoundError(NotFoundError):
    code = "WAITER_NOT_FOUND"


class MenuItemNotFoundError(NotFoundError):
    code = "MENU_ITEM_NOT_FOUND"


class InvalidTabTransitionError(StateError):
    code = "INVALID_TAB_TRANSITION"


class InvalidOrderTransitionError(StateError):
    code = "INVALID_ORDER_TRANSITION"


class TabClosedError(StateError):
    code = "TAB_CLOSED"
