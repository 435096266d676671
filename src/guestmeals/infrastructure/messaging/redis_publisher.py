from __future__ import annotations

import logging

from guestmeals.application.ports.publisher import EventPublisher
from guestmeals.infrastructure.messaging.redis_client import channel_name, get_redis_client

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        client = get_redis_client(timeout_seconds=self._timeout_seconds)
        receivers = client.publish(channel_name(channel), message)
        if not receivers:
            # Pub/sub is fire-and-forget; nobody listening means the event is gone.
            logger.debug("event_unheard", extra={"channel": channel_name(channel)})


class LoggingEventPublisher(EventPublisher):
    """Publisher used when no broker is configured; events only reach the log."""

    def publish(self, channel: str, message: str) -> None:
        logger.info("event_published", extra={"channel": channel, "event": message})
