from __future__ import annotations

import asyncio
import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from billo.application.metrics.tab_lifecycle import (
    record_subscription_closed,
    record_subscription_opened,
)
from billo.application.projections.topics import topics_for_event

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[list[Any]]]


@dataclass(frozen=True)
class ProjectionSnapshot:
    topic: str
    items: list[Any] = field(default_factory=list)
    error: str | None = None


SnapshotCallback = Callable[[ProjectionSnapshot], Awaitable[None]]


def threaded_loader(load: Callable[[], list[Any]]) -> Loader:
    """Run a blocking store read in the default executor."""

    async def loader() -> list[Any]:
        return await asyncio.to_thread(load)

    return loader


class Subscription:
    """Handle for one live view of a topic.

    ``cancel()`` is synchronous: once it returns no further snapshot reaches
    the callback. A failed load marks the handle with a sticky ``error``; it
    stays attached until cancelled but is not reloaded by later events.
    """

    def __init__(self, hub: ProjectionHub, topic: str, callback: SnapshotCallback) -> None:
        self.topic = topic
        self.error: str | None = None
        self._hub = hub
        self._callback = callback
        self._loader: Loader | None = None
        self._lock = asyncio.Lock()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._hub._detach(self)

    async def refresh(self) -> None:
        if self._cancelled:
            return
        async with self._lock:
            if self._cancelled or self.error is not None or self._loader is None:
                return
            try:
                items = await self._loader()
            except Exception as exc:
                await self._deliver(self._fail(exc))
                return
            await self._deliver(ProjectionSnapshot(topic=self.topic, items=items))

    def _fail(self, exc: Exception) -> ProjectionSnapshot:
        self.error = str(exc) or type(exc).__name__
        logger.warning("projection_load_failed", extra={"topic": self.topic}, exc_info=exc)
        return ProjectionSnapshot(topic=self.topic, items=[], error=self.error)

    async def _deliver(self, snapshot: ProjectionSnapshot) -> None:
        if self._cancelled:
            return
        try:
            await self._callback(snapshot)
        except Exception:
            logger.warning("projection_callback_failed", extra={"topic": self.topic}, exc_info=True)
            self.cancel()


class ProjectionHub:
    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, ()))

    async def subscribe(
        self,
        topic: str,
        loaders: Sequence[Loader],
        callback: SnapshotCallback,
    ) -> Subscription:
        """Attach a live view and deliver its first snapshot.

        Loaders are tried in order until one succeeds; that loader serves all
        later refreshes. If every loader fails the callback gets an empty
        snapshot carrying the error. Cancelling the caller mid-setup detaches
        the handle before the cancellation propagates.
        """
        if not loaders:
            raise ValueError("at least one loader is required")

        subscription = Subscription(self, topic, callback)
        self._attach(subscription)
        try:
            async with subscription._lock:
                snapshot = await self._initial_snapshot(subscription, loaders)
                await subscription._deliver(snapshot)
        except asyncio.CancelledError:
            subscription.cancel()
            raise
        return subscription

    async def dispatch(self, message: str) -> None:
        try:
            envelope = json.loads(message)
        except ValueError:
            logger.warning("projection_event_invalid")
            return
        if not isinstance(envelope, dict):
            return

        for topic in topics_for_event(envelope):
            for subscription in list(self._subscriptions.get(topic, ())):
                await subscription.refresh()

    async def _initial_snapshot(
        self,
        subscription: Subscription,
        loaders: Sequence[Loader],
    ) -> ProjectionSnapshot:
        *fallbacks, last = loaders
        for loader in fallbacks:
            try:
                items = await loader()
            except Exception:
                logger.warning(
                    "projection_loader_fallback",
                    extra={"topic": subscription.topic},
                    exc_info=True,
                )
                continue
            subscription._loader = loader
            return ProjectionSnapshot(topic=subscription.topic, items=items)

        subscription._loader = last
        try:
            items = await last()
        except Exception as exc:
            return subscription._fail(exc)
        return ProjectionSnapshot(topic=subscription.topic, items=items)

    def _attach(self, subscription: Subscription) -> None:
        self._subscriptions[subscription.topic].append(subscription)
        record_subscription_opened(subscription.topic)

    def _detach(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.topic)
        if not subscribers or subscription not in subscribers:
            return
        subscribers.remove(subscription)
        if not subscribers:
            self._subscriptions.pop(subscription.topic, None)
        record_subscription_closed(subscription.topic)
