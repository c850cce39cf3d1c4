# barledger/backtest/sizing/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from barledger.backtest.core.events import OrderEvent, SignalEvent


class SizingPolicy(ABC):
    """
    SizingPolicy (FINAL / FROZEN)

    Pure decision:
      (live position, SignalEvent) -> OrderEvent | None

    Must NOT read or write the Ledger; the translator hands it
    the current quantity.
    """

    @abstractmethod
    def size(self, signal: SignalEvent, current_quantity: int) -> Optional[OrderEvent]:
        ...
