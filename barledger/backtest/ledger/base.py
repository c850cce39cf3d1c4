# barledger/backtest/ledger/base.py
from __future__ import annotations

from abc import ABC, abstractmethod

from barledger.backtest.core.events import FillEvent, MarketEvent, OrderEvent, SignalEvent


class Portfolio(ABC):
    @abstractmethod
    def on_market(self, event: MarketEvent) -> None:
        ...

    @abstractmethod
    def on_signal(self, signal: SignalEvent) -> OrderEvent | None:
        ...

    @abstractmethod
    def on_fill(self, fill: FillEvent) -> None:
        ...
