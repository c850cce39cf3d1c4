from __future__ import annotations

import math
from typing import Dict, Literal, Mapping, Optional

from barledger import logs
from barledger.backtest.core.errors import DesynchronizedBars, MissingMarketData
from barledger.backtest.data.base import Bar, BarDataProvider
from barledger.backtest.ledger.ledger import HoldingsSnapshot, Ledger, PositionSnapshot
from barledger.utils.datetime_utils import DateTimeUtils

"""
{#!filepath: barledger/backtest/ledger/time_index.py}

TimeIndexUpdater (FINAL / FROZEN)

Role:
- At each bar-close, mark live positions to market and append
  one PositionSnapshot + one HoldingsSnapshot to the Ledger.

Mark-to-Market:
    market_value[s] = position[s] * close[s]
    totalholdings   = heldcash + sum(market_value)
    returns         = totalholdings / previous_totalholdings - 1
    equitycurve     = (previous_equitycurve + 1) * (1 + returns) - 1

Timestamp alignment:
- strict      : every symbol's latest bar must share one ts
- approximate : snapshot keyed by the last symbol's bar ts, skew logged

Invariants:
- Does NOT mutate live state.
- Never rewrites an existing snapshot.
"""

Alignment = Literal["strict", "approximate"]


class TimeIndexUpdater:
    def __init__(
        self,
        *,
        ledger: Ledger,
        bars: BarDataProvider,
        bar_alignment: Alignment = "strict",
    ) -> None:
        if bar_alignment not in ("strict", "approximate"):
            raise ValueError(f"[TimeIndex] unknown bar_alignment={bar_alignment}")

        self.ledger = ledger
        self.bars = bars
        self.bar_alignment = bar_alignment

    # --------------------------------------------------
    def latest_bars(self, given: Optional[Mapping[str, Bar]] = None) -> Dict[str, Bar]:
        latest: Dict[str, Bar] = {}
        for symbol in self.ledger.symbols:
            bar = given.get(symbol) if given is not None else self.bars.latest_bar(symbol)
            if bar is None:
                raise MissingMarketData(f"[TimeIndex] no bar for symbol={symbol}")
            if not math.isfinite(bar.close):
                raise MissingMarketData(
                    f"[TimeIndex] invalid close={bar.close} symbol={symbol} ts={bar.ts}"
                )
            latest[symbol] = bar
        return latest

    def cycle_ts(self, latest: Dict[str, Bar]) -> int:
        stamps = {bar.ts for bar in latest.values()}
        if len(stamps) == 1:
            return stamps.pop()

        skew = {s: bar.ts for s, bar in latest.items()}
        if self.bar_alignment == "strict":
            raise DesynchronizedBars(f"[TimeIndex] latest bars disagree on ts: {skew}")

        # reference behaviour: the last symbol's bar keys the whole cycle
        ts = latest[self.ledger.symbols[-1]].ts
        logs.warning(f"[TimeIndex] desynchronized bars, keying snapshot at ts={ts}: {skew}")
        return ts

    # --------------------------------------------------
    def advance(self, latest_bars_by_symbol: Optional[Mapping[str, Bar]] = None) -> HoldingsSnapshot:
        """
        latest_bars_by_symbol: bars of this cycle when the dispatcher already
        holds them; otherwise each symbol's latest bar is read from the provider.
        """
        latest = self.latest_bars(latest_bars_by_symbol)
        ts = self.cycle_ts(latest)

        live = self.ledger.live
        positions = dict(live.current_positions)

        market_values: Dict[str, float] = {}
        for symbol, bar in latest.items():
            market_values[symbol] = positions[symbol] * bar.close

        total = live.heldcash + sum(market_values.values())

        previous = self.ledger.holdings_history.last
        if previous.totalholdings == 0:
            logs.warning(f"[TimeIndex] previous totalholdings is 0 at ts={previous.ts}, returns set to 0")
            returns = 0.0
        else:
            returns = total / previous.totalholdings - 1
        equitycurve = (previous.equitycurve + 1) * (1 + returns) - 1

        snapshot = self.ledger.record_bar(
            PositionSnapshot(ts=ts, positions=positions),
            HoldingsSnapshot(
                ts=ts,
                market_values=market_values,
                heldcash=live.heldcash,
                commission=live.commission,
                totalholdings=total,
                returns=returns,
                equitycurve=equitycurve,
            ),
        )

        logs.debug(
            f"[TimeIndex] date={DateTimeUtils.fmt(ts)} total={total:.2f} "
            f"returns={returns:.6f} equitycurve={equitycurve:.6f}"
        )
        return snapshot
