# barledger/backtest/data/bars.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from barledger import logs
from barledger.backtest.core.channels import EventChannel
from barledger.backtest.core.errors import MissingMarketData
from barledger.backtest.core.events import MarketEvent
from barledger.backtest.data.base import Bar, BarDataProvider
from barledger.utils.datetime_utils import DateTimeUtils
from barledger.utils.errors import UserInputError

OHLC = ["open", "high", "low", "close"]


class HistoricalBarProvider(BarDataProvider):
    """
    HistoricalBarProvider (FINAL)

    In-memory bar replay over per-symbol OHLC frames.

    Semantics:
      - all symbols share ONE timeline: the union of their indices
      - a step with no row for a symbol leaves its previous bar as the
        latest one, with that bar's own ts (never relabelled)
      - before a symbol's first bar it has no data at all
      - update_bars() drips one timeline step and emits one MarketEvent

    A gap is therefore visible downstream: strict bar alignment raises
    DesynchronizedBars and approximate alignment logs the skew. Every
    symbol must also have a bar at the first timeline step, otherwise the
    first bar-close fails with MissingMarketData.
    """

    def __init__(self, frames: Mapping[str, pd.DataFrame]) -> None:
        if not frames:
            raise ValueError("[HistoricalBarProvider] empty frames")

        self._symbols = list(frames)
        self._timeline, self._bars, self._seen = self._align(frames)
        self._cursor = 0
        self.continue_backtest = len(self._timeline) > 0

        logs.info(
            f"[HistoricalBarProvider] symbols={self._symbols} n_bars={len(self._timeline)}"
        )

    # --------------------------------------------------
    # construction
    # --------------------------------------------------
    @classmethod
    def from_csv_dir(cls, csv_dir: str | Path, symbols: Iterable[str]) -> "HistoricalBarProvider":
        """
        <csv_dir>/<SYMBOL>.csv with columns:
            datetime,open,high,low,close[,volume]
        """
        csv_dir = Path(csv_dir)
        frames: Dict[str, pd.DataFrame] = {}

        for symbol in symbols:
            path = csv_dir / f"{symbol}.csv"
            if not path.exists():
                raise UserInputError(f"[HistoricalBarProvider] missing csv for {symbol}: {path}")

            df = pd.read_csv(path, parse_dates=["datetime"], index_col="datetime")
            df.columns = [c.strip().lower() for c in df.columns]
            frames[symbol] = df.sort_index()

        return cls(frames)

    @classmethod
    def from_records(
        cls,
        records: Mapping[str, Sequence[Tuple[int, float, float, float, float]]],
    ) -> "HistoricalBarProvider":
        """
        symbol -> [(ts_us, open, high, low, close), ...]
        """
        frames = {
            symbol: pd.DataFrame(
                [r[1:5] for r in rows],
                columns=OHLC,
                index=pd.Index([int(r[0]) for r in rows], name="ts", dtype="int64"),
            )
            for symbol, rows in records.items()
        }
        return cls(frames)

    @staticmethod
    def _align(
        frames: Mapping[str, pd.DataFrame],
    ) -> Tuple[List[int], Dict[str, List[Bar]], Dict[str, np.ndarray]]:
        """
        Returns the shared timeline, each symbol's own bars (ascending ts),
        and per symbol how many of those bars are visible at each timeline step.
        """
        prepared: Dict[str, pd.DataFrame] = {}

        for symbol, df in frames.items():
            missing = [c for c in OHLC if c not in df.columns]
            if missing:
                raise UserInputError(f"[HistoricalBarProvider] {symbol} missing columns {missing}")

            df = df.copy()
            if "volume" not in df.columns:
                df["volume"] = 0.0
            df = df[OHLC + ["volume"]].dropna(subset=["close"])

            if isinstance(df.index, pd.DatetimeIndex):
                df.index = pd.Index(DateTimeUtils.index_to_ts_us(df.index), dtype="int64")
            df = df[~df.index.duplicated(keep="last")].sort_index()
            prepared[symbol] = df

        timeline = np.array(
            sorted(set().union(*(df.index for df in prepared.values()))), dtype="int64"
        )

        bars: Dict[str, List[Bar]] = {}
        seen: Dict[str, np.ndarray] = {}
        for symbol, df in prepared.items():
            bars[symbol] = [
                Bar(
                    ts=int(ts),
                    open=float(row.open),
                    high=float(row.high),
                    low=float(row.low),
                    close=float(row.close),
                    volume=float(row.volume),
                )
                for ts, row in zip(df.index, df.itertuples(index=False))
            ]
            seen[symbol] = np.searchsorted(df.index.to_numpy(dtype="int64"), timeline, side="right")

        return [int(t) for t in timeline], bars, seen

    # --------------------------------------------------
    # replay
    # --------------------------------------------------
    @property
    def symbols(self) -> List[str]:
        return list(self._symbols)

    @property
    def timeline(self) -> List[int]:
        return list(self._timeline)

    @property
    def current_ts(self) -> Optional[int]:
        if self._cursor == 0:
            return None
        return self._timeline[self._cursor - 1]

    def update_bars(self, events: EventChannel) -> bool:
        """
        Advance one bar for every symbol and emit a MarketEvent.
        Returns False (and clears continue_backtest) once exhausted.
        """
        if self._cursor >= len(self._timeline):
            self.continue_backtest = False
            return False

        self._cursor += 1
        events.put(MarketEvent(ts=self._timeline[self._cursor - 1]))

        if self._cursor >= len(self._timeline):
            self.continue_backtest = False
        return True

    def get_latest_bars(self, symbol: str, n: int = 1) -> List[Bar]:
        if symbol not in self._bars:
            raise MissingMarketData(f"[HistoricalBarProvider] unknown symbol={symbol}")
        if n <= 0 or self._cursor == 0:
            return []

        k = int(self._seen[symbol][self._cursor - 1])
        return self._bars[symbol][max(0, k - n):k]
