from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List
"""
{#!filepath: barledger/backtest/data/base.py}

BarDataProvider (FINAL / FROZEN)

Defines WHAT market data the portfolio core may observe.

Contract:
- get_latest_bars(symbol, n): most recent n bars, ascending by ts
- latest_bar(symbol): the single most recent bar

Invariants:
- Lookups are in-memory reads; no IO on the hot path
- Never returns a bar from the future of the replay cursor
- Unknown symbols are an error, not an empty answer
"""


@dataclass(frozen=True)
class Bar:
    ts: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class BarDataProvider(ABC):
    """
    World-facing bar interface.

    Answers ONE question:
    - What are the last n completed bars for this symbol?
    """

    @abstractmethod
    def get_latest_bars(self, symbol: str, n: int = 1) -> List[Bar]:
        """Most recent n bars (fewer if not available), ascending by ts"""

    def latest_bar(self, symbol: str) -> Bar | None:
        bars = self.get_latest_bars(symbol, 1)
        return bars[-1] if bars else None
