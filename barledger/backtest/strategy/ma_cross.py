from __future__ import annotations

from typing import Dict, List

import numpy as np

from barledger.backtest.core.events import MarketEvent, SignalEvent, SignalType
from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.strategy.base import Strategy


class MovingAverageCrossStrategy(Strategy):
    """
    Reference strategy

    Rules (per symbol, on closes):
      - short SMA crosses above long SMA while out -> LONG
      - short SMA crosses below long SMA while in  -> EXIT
      - fewer than long_window bars               -> nothing
    """

    def __init__(
        self,
        bars: BarDataProvider,
        symbols: List[str],
        short_window: int = 10,
        long_window: int = 40,
        strength: float = 1.0,
    ) -> None:
        if not 0 < short_window < long_window:
            raise ValueError(
                f"[MovingAverageCross] need 0 < short_window < long_window, "
                f"got {short_window}/{long_window}"
            )
        self._bars = bars
        self._symbols = list(symbols)
        self._short = short_window
        self._long = long_window
        self._strength = strength
        self._invested: Dict[str, bool] = {s: False for s in self._symbols}

    def on_market(self, event: MarketEvent) -> List[SignalEvent]:
        signals: List[SignalEvent] = []

        for symbol in self._symbols:
            bars = self._bars.get_latest_bars(symbol, self._long)
            if len(bars) < self._long:
                continue

            closes = np.array([b.close for b in bars], dtype=float)
            short_sma = closes[-self._short:].mean()
            long_sma = closes.mean()

            if short_sma > long_sma and not self._invested[symbol]:
                signal_type = SignalType.LONG
                self._invested[symbol] = True
            elif short_sma < long_sma and self._invested[symbol]:
                signal_type = SignalType.EXIT
                self._invested[symbol] = False
            else:
                continue

            signals.append(
                SignalEvent(
                    ts=event.ts,
                    symbol=symbol,
                    signal_type=signal_type.value,
                    strength=self._strength,
                )
            )

        return signals
