import json
import logging
from typing import Any, Dict

try:
    import redis
except Exception:  # pragma: no cover
    redis = None

from ...application.ports.change_feed import ChangeEvent, ChangeFeed, ChangeHandler, Subscription

logger = logging.getLogger(__name__)


class _RedisSubscription(Subscription):
    def __init__(self, pubsub, thread):
        self._pubsub = pubsub
        self._thread = thread

    def close(self) -> None:
        if self._thread is not None:
            self._thread.stop()
            self._thread = None
        self._pubsub.close()


class RedisChangeFeed(ChangeFeed):
    """Change feed over Redis pub/sub, one channel per ``table:key``."""

    def __init__(self, url: str, prefix: str = "therapal:") -> None:
        if redis is None:
            raise RuntimeError("redis package is not installed")
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def channel(self, table: str, key: str) -> str:
        return f"{self.prefix}{table}:{key}"

    def publish(self, table: str, key: str, record: Dict[str, Any]) -> None:
        message = json.dumps({"table": table, "key": key, "event": "INSERT", "record": record}, default=str)
        self.client.publish(self.channel(table, key), message)

    def subscribe(self, table: str, key: str, handler: ChangeHandler) -> Subscription:
        def on_message(message) -> None:
            try:
                data = json.loads(message["data"])
                handler(ChangeEvent(
                    table=data.get("table", table),
                    key=data.get("key", key),
                    event=data.get("event", "INSERT"),
                    record=data.get("record") or {},
                ))
            except Exception:
                logger.exception(f"Change handler failed for {table}:{key}")

        pubsub = self.client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(**{self.channel(table, key): on_message})
        thread = pubsub.run_in_thread(sleep_time=0.05, daemon=True)
        return _RedisSubscription(pubsub, thread)
