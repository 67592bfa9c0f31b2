from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from billo.domain.tab.aggregates import TabAggregates
from billo.domain.tab.entities import Tab
from billo.domain.tab.transitions import TabStatus


@dataclass(frozen=True)
class TabCreated:
    tab: Tab
    initiator: str
    occurred_at: datetime


@dataclass(frozen=True)
class TabActivated:
    tab: Tab
    occurred_at: datetime


@dataclass(frozen=True)
class TabStatusChanged:
    tab: Tab
    from_status: TabStatus
    occurred_at: datetime


@dataclass(frozen=True)
class TabReconciled:
    tab: Tab
    previous: TabAggregates
    occurred_at: datetime

    @property
    def drifted(self) -> bool:
        return self.previous != self.tab.aggregates()


@dataclass(frozen=True)
class TabDeleted:
    tab: Tab
    occurred_at: datetime
