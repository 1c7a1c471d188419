import logging
import threading
from typing import Any, Dict, List, Tuple

from ...application.ports.change_feed import ChangeEvent, ChangeFeed, ChangeHandler, Subscription

logger = logging.getLogger(__name__)


class _MemorySubscription(Subscription):
    def __init__(self, feed: "InMemoryChangeFeed", key: Tuple[str, str], handler: ChangeHandler):
        self._feed = feed
        self._key = key
        self.handler = handler

    def close(self) -> None:
        self._feed._remove(self._key, self)


class InMemoryChangeFeed(ChangeFeed):
    """Single-process feed; handlers run on the publishing thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: Dict[Tuple[str, str], List[_MemorySubscription]] = {}

    def subscribe(self, table: str, key: str, handler: ChangeHandler) -> Subscription:
        sub = _MemorySubscription(self, (table, key), handler)
        with self._lock:
            self._subs.setdefault((table, key), []).append(sub)
        return sub

    def _remove(self, key: Tuple[str, str], sub: _MemorySubscription) -> None:
        with self._lock:
            subs = self._subs.get(key, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subs.pop(key, None)

    def subscriber_count(self, table: str, key: str) -> int:
        with self._lock:
            return len(self._subs.get((table, key), []))

    def publish(self, table: str, key: str, record: Dict[str, Any]) -> None:
        with self._lock:
            targets = list(self._subs.get((table, key), []))
        event = ChangeEvent(table=table, key=key, event="INSERT", record=dict(record))
        for sub in targets:
            try:
                sub.handler(event)
            except Exception:
                logger.exception(f"Change handler failed for {table}:{key}")
