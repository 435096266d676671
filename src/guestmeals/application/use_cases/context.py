from __future__ import annotations

import logging
from dataclasses import dataclass

from guestmeals.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceContext:
    trace_id: str | None = None
    request_id: str | None = None


def publish_event(publisher: EventPublisher, channel: str, message: str, event_type: str) -> None:
    """Fan an event out to listeners; a broken broker never fails the request."""
    try:
        publisher.publish(channel=channel, message=message)
    except Exception:
        logger.warning(
            "event_publish_failed",
            extra={"channel": channel, "event_type": event_type},
            exc_info=True,
        )
