# tests/backtest/conftest.py
from __future__ import annotations

from typing import Dict, List

import pytest

from barledger.backtest.core.channels import EventChannel, OrderChannel
from barledger.backtest.data.base import Bar, BarDataProvider
from barledger.backtest.ledger.ledger import Ledger


class StaticBars(BarDataProvider):
    """
    Hand-fed bar provider: tests push bars, the core reads them.
    """

    def __init__(self) -> None:
        self._bars: Dict[str, List[Bar]] = {}

    def push(self, symbol: str, ts: int, close: float) -> None:
        self._bars.setdefault(symbol, []).append(
            Bar(ts=ts, open=close, high=close, low=close, close=close)
        )

    def push_all(self, ts: int, closes: Dict[str, float]) -> None:
        for symbol, close in closes.items():
            self.push(symbol, ts, close)

    def get_latest_bars(self, symbol: str, n: int = 1) -> List[Bar]:
        return self._bars.get(symbol, [])[-n:] if n > 0 else []


@pytest.fixture
def bars() -> StaticBars:
    return StaticBars()


@pytest.fixture
def ledger() -> Ledger:
    return Ledger.initialize(["AAA", "BBB"], start_ts=1, initial_capital=100_000.0)


@pytest.fixture
def events() -> EventChannel:
    return EventChannel()


@pytest.fixture
def orders() -> OrderChannel:
    return OrderChannel()
