from __future__ import annotations

import logging

from billo.application.mappers.event_envelope import event_channel
from billo.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)


def publish_event(
    publisher: EventPublisher,
    *,
    restaurant_id: str,
    event_type: str,
    message: str,
) -> None:
    # Called after commit; a failed publish never fails the request.
    try:
        publisher.publish(channel=event_channel(restaurant_id), message=message)
    except Exception:
        logger.warning(
            "event_publish_failed",
            extra={"restaurant_id": restaurant_id, "event_type": event_type},
            exc_info=True,
        )
