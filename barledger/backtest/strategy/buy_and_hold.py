from __future__ import annotations

from typing import Dict, List

from barledger.backtest.core.events import MarketEvent, SignalEvent, SignalType
from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.strategy.base import Strategy


class BuyAndHoldStrategy(Strategy):
    """
    Reference strategy

    Rules:
      - first bar seen for a symbol -> LONG (strength)
      - never exits

    A symbol with no bar yet is skipped. In a bar replay every symbol has a
    bar at the first step (the bar-close before it fails otherwise), so this
    only matters when events are fed by hand.
    """

    def __init__(self, bars: BarDataProvider, symbols: List[str], strength: float = 1.0) -> None:
        self._bars = bars
        self._symbols = list(symbols)
        self._strength = strength
        self._bought: Dict[str, bool] = {s: False for s in self._symbols}

    def on_market(self, event: MarketEvent) -> List[SignalEvent]:
        signals: List[SignalEvent] = []

        for symbol in self._symbols:
            if self._bought[symbol]:
                continue
            if self._bars.latest_bar(symbol) is None:
                continue

            signals.append(
                SignalEvent(
                    ts=event.ts,
                    symbol=symbol,
                    signal_type=SignalType.LONG.value,
                    strength=self._strength,
                )
            )
            self._bought[symbol] = True

        return signals
