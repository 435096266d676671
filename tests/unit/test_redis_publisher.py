from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guestmeals.infrastructure.messaging import redis_publisher
from guestmeals.infrastructure.messaging.redis_client import channel_name


class FakeRedis:
    def __init__(self, receivers: int = 1) -> None:
        self.receivers = receivers
        self.published: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return self.receivers


def test_channel_name_without_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REDIS_CHANNEL_PREFIX", raising=False)
    assert channel_name("events:orders") == "events:orders"


def test_channel_name_with_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REDIS_CHANNEL_PREFIX", "hillview:")
    assert channel_name("events:orders") == "hillview:events:orders"


def test_redis_publisher_sends_to_namespaced_channel(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeRedis(receivers=0)
    monkeypatch.setenv("REDIS_CHANNEL_PREFIX", "hillview")
    monkeypatch.setattr(redis_publisher, "get_redis_client", lambda timeout_seconds: fake)

    redis_publisher.RedisEventPublisher(timeout_seconds=0.5).publish("events:orders", '{"type":"order.placed"}')

    assert fake.published == [("hillview:events:orders", '{"type":"order.placed"}')]
