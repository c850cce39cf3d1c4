# tests/backtest/strategy/test_strategies.py
from __future__ import annotations

import pytest

from barledger.backtest.core.events import MarketEvent
from barledger.backtest.strategy.buy_and_hold import BuyAndHoldStrategy
from barledger.backtest.strategy.ma_cross import MovingAverageCrossStrategy


def test_buy_and_hold_signals_once_per_symbol(bars):
    strat = BuyAndHoldStrategy(bars, ["AAA", "BBB"], strength=0.5)

    bars.push("AAA", 10, 1.0)
    first = strat.on_market(MarketEvent(ts=10))
    assert [(s.symbol, s.signal_type, s.strength) for s in first] == [("AAA", "LONG", 0.5)]

    bars.push_all(20, {"AAA": 1.0, "BBB": 2.0})
    second = strat.on_market(MarketEvent(ts=20))
    assert [s.symbol for s in second] == ["BBB"]

    assert strat.on_market(MarketEvent(ts=30)) == []


def test_ma_cross_long_then_exit(bars):
    strat = MovingAverageCrossStrategy(bars, ["AAA"], short_window=2, long_window=3)

    closes = [5, 4, 3, 4, 5, 6, 5, 4, 3]
    emitted = []
    for i, close in enumerate(closes):
        ts = (i + 1) * 10
        bars.push("AAA", ts, float(close))
        emitted += [(s.ts, s.signal_type) for s in strat.on_market(MarketEvent(ts=ts))]

    assert emitted == [(50, "LONG"), (80, "EXIT")]


def test_ma_cross_needs_long_window(bars):
    strat = MovingAverageCrossStrategy(bars, ["AAA"], short_window=1, long_window=5)
    for ts in range(1, 5):
        bars.push("AAA", ts, float(ts))
        assert strat.on_market(MarketEvent(ts=ts)) == []


@pytest.mark.parametrize("short, long", [(0, 3), (3, 3), (5, 2)])
def test_ma_cross_rejects_bad_windows(bars, short, long):
    with pytest.raises(ValueError):
        MovingAverageCrossStrategy(bars, ["AAA"], short_window=short, long_window=long)
