# barledger/backtest/execution/base.py
from __future__ import annotations

from abc import ABC, abstractmethod

from barledger.backtest.core.events import FillEvent, OrderEvent


class ExecutionHandler(ABC):
    """
    Orders in, fills out. The portfolio core never calls this;
    the dispatcher does.
    """

    @abstractmethod
    def on_order(self, order: OrderEvent) -> FillEvent | None:
        ...
