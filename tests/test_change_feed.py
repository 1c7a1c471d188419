import json

import pytest

from therapal.application.ports.change_feed import ChangeEvent
from therapal.infrastructure.realtime.memory_change_feed import InMemoryChangeFeed


def test_memory_feed_delivers_to_matching_subscribers():
    feed = InMemoryChangeFeed()
    seen = []
    feed.subscribe("chat_messages", "A1", seen.append)
    feed.subscribe("chat_messages", "B2", lambda e: seen.append("wrong"))

    feed.publish("chat_messages", "A1", {"id": "m1"})

    assert len(seen) == 1
    assert isinstance(seen[0], ChangeEvent)
    assert seen[0].event == "INSERT"
    assert seen[0].record == {"id": "m1"}


def test_memory_feed_isolates_failing_handler():
    feed = InMemoryChangeFeed()
    seen = []

    def boom(event):
        raise RuntimeError("handler crashed")

    feed.subscribe("chat_messages", "A1", boom)
    feed.subscribe("chat_messages", "A1", seen.append)
    feed.publish("chat_messages", "A1", {})

    assert len(seen) == 1


def test_memory_subscription_close():
    feed = InMemoryChangeFeed()
    seen = []
    sub = feed.subscribe("chat_messages", "A1", seen.append)
    assert feed.subscriber_count("chat_messages", "A1") == 1

    sub.close()
    sub.close()
    feed.publish("chat_messages", "A1", {})

    assert seen == []
    assert feed.subscriber_count("chat_messages", "A1") == 0


class _FakeThread:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class _FakePubSub:
    def __init__(self):
        self.handlers = {}
        self.closed = False
        self.thread = _FakeThread()

    def subscribe(self, **handlers):
        self.handlers.update(handlers)

    def run_in_thread(self, sleep_time=0.0, daemon=False):
        return self.thread

    def close(self):
        self.closed = True


class _FakeRedis:
    def __init__(self):
        self.published = []
        self.pubsubs = []

    @classmethod
    def from_url(cls, url):
        return cls()

    def publish(self, channel, message):
        self.published.append((channel, message))
        for ps in self.pubsubs:
            handler = ps.handlers.get(channel)
            if handler and not ps.closed:
                handler({"type": "message", "channel": channel, "data": message})

    def pubsub(self, ignore_subscribe_messages=False):
        ps = _FakePubSub()
        self.pubsubs.append(ps)
        return ps


def test_redis_feed_round_trip(monkeypatch):
    redis = pytest.importorskip("redis")
    from therapal.infrastructure.realtime import redis_change_feed

    monkeypatch.setattr(redis_change_feed.redis, "Redis", _FakeRedis)
    feed = redis_change_feed.RedisChangeFeed("redis://localhost:6379/0", prefix="test:")
    seen = []

    sub = feed.subscribe("chat_messages", "A1", seen.append)
    feed.publish("chat_messages", "A1", {"id": "m1"})

    channel, raw = feed.client.published[0]
    assert channel == "test:chat_messages:A1"
    assert json.loads(raw)["record"] == {"id": "m1"}
    assert seen[0].key == "A1"
    assert seen[0].record == {"id": "m1"}

    pubsub = feed.client.pubsubs[0]
    sub.close()
    assert pubsub.closed
    assert pubsub.thread.stopped
