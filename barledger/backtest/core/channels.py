# barledger/backtest/core/channels.py
from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterator, List, Optional, TypeVar

from barledger.backtest.core.events import Event, OrderEvent

T = TypeVar("T")


class Channel(Generic[T]):
    """
    Channel (FROZEN)

    Explicit single-direction FIFO message channel.

    Contract:
      - put() appends at the tail
      - get() pops from the head, None when empty
      - never reorders, never merges
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._items: Deque[T] = deque()
        self._n_put = 0

    def put(self, item: T) -> None:
        self._items.append(item)
        self._n_put += 1

    def get(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items.popleft()

    def drain(self) -> Iterator[T]:
        """
        Pop items until empty. Items put while draining are yielded too.
        """
        while self._items:
            yield self._items.popleft()

    def peek_all(self) -> List[T]:
        return list(self._items)

    @property
    def total_put(self) -> int:
        return self._n_put

    def empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, size={len(self)})"


class EventChannel(Channel[Event]):
    """Inbound: Market / Signal / Fill events delivered to the core."""

    def __init__(self, name: str = "inbound") -> None:
        super().__init__(name)


class OrderChannel(Channel[OrderEvent]):
    """Outbound: orders emitted by the core for the execution handler."""

    def __init__(self, name: str = "orders") -> None:
        super().__init__(name)
