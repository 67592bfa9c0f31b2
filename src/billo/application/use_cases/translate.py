from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from billo.application.errors import (
    InvalidOrderTransitionError,
    InvalidTabTransitionError,
    NotFoundError,
    OrderNotFoundError,
    RestaurantNotFoundError,
    StateError,
    TabClosedError,
    TabNotFoundError,
)
from billo.application.metrics.tab_lifecycle import record_tab_transition_blocked
from billo.application.ports.repositories import RowNotFoundError
from billo.domain.order.entities import OrderTransitionError
from billo.domain.tab.entities import TabStateError
from billo.domain.tab.transitions import TabTransitionError

_NOT_FOUND: dict[str, type[NotFoundError]] = {
    "tab": TabNotFoundError,
    "order": OrderNotFoundError,
    "restaurant": RestaurantNotFoundError,
}


@contextmanager
def domain_errors() -> Iterator[None]:
    """Re-raise repository and domain failures as application errors."""
    try:
        yield
    except RowNotFoundError as exc:
        error_cls = _NOT_FOUND.get(exc.entity, NotFoundError)
        raise error_cls(str(exc), details={exc.entity + "Id": exc.key}) from exc
    except TabTransitionError as exc:
        record_tab_transition_blocked(exc.reason)
        raise InvalidTabTransitionError(
            str(exc),
            details={
                "from": exc.from_status.value,
                "to": exc.to_status.value,
                "reason": exc.reason,
            },
        ) from exc
    except TabStateError as exc:
        if exc.reason == "TAB_CLOSED":
            raise TabClosedError(str(exc), details={"reason": exc.reason}) from exc
        raise StateError(str(exc), code=exc.reason, details={"reason": exc.reason}) from exc
    except OrderTransitionError as exc:
        raise InvalidOrderTransitionError(
            str(exc),
            details={"from": exc.from_status.value, "to": exc.to_status.value},
        ) from exc
