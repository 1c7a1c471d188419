from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Protocol


@dataclass
class ChangeEvent:
    table: str
    key: str
    event: str = "INSERT"
    record: Dict[str, Any] = field(default_factory=dict)


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    def close(self) -> None:
        ...


class ChangeFeed(Protocol):
    def publish(self, table: str, key: str, record: Dict[str, Any]) -> None:
        ...

    def subscribe(self, table: str, key: str, handler: ChangeHandler) -> Subscription:
        ...
