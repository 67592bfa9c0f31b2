from __future__ import annotations

from datetime import date

from billo.application.dto.responses import TabResponse
from billo.application.errors import RestaurantNotFoundError, TabNotFoundError
from billo.application.mappers.tab_mapper import to_tab_response
from billo.application.ports.repositories import RestaurantRepository, TabRepository
from billo.application.use_cases.context import Clock, utc_now
from billo.domain.common.ids import RestaurantId, TabId


class GetTab:
    def __init__(self, tab_repository: TabRepository) -> None:
        self._tab_repository = tab_repository

    def execute(self, tab_id: TabId) -> TabResponse:
        tab = self._tab_repository.get(tab_id)
        if tab is None:
            raise TabNotFoundError(f"tab {tab_id} not found", details={"tabId": str(tab_id)})
        return to_tab_response(tab)


class GetTabByReference:
    """Look a tab up by the number printed for the customer.

    References restart daily, so the lookup is scoped to one local day;
    without an explicit date it is today in the restaurant's timezone.
    """

    def __init__(
        self,
        tab_repository: TabRepository,
        restaurant_repository: RestaurantRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._tab_repository = tab_repository
        self._restaurant_repository = restaurant_repository
        self._clock = clock

    def execute(
        self,
        restaurant_id: RestaurantId,
        reference_number: str,
        reference_date: date | None = None,
    ) -> TabResponse:
        restaurant = self._restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(
                f"restaurant {restaurant_id} not found",
                details={"restaurantId": str(restaurant_id)},
            )
        day = reference_date or restaurant.local_date(self._clock())
        tab = self._tab_repository.get_by_reference(
            restaurant_id=restaurant_id,
            reference_number=reference_number.strip(),
            reference_date=day,
        )
        if tab is None:
            raise TabNotFoundError(
                f"no tab with reference {reference_number} on {day.isoformat()}",
                details={"referenceNumber": reference_number, "referenceDate": day.isoformat()},
            )
        return to_tab_response(tab)
