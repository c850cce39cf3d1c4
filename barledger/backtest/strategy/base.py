# barledger/backtest/strategy/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from barledger.backtest.core.events import MarketEvent, SignalEvent


class Strategy(ABC):
    """
    Strategy (FINAL / FROZEN)

    Pure interpreter:
      MarketEvent -> [SignalEvent, ...]
    """

    @abstractmethod
    def on_market(self, event: MarketEvent) -> List[SignalEvent]:
        ...
