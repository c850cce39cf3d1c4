# barledger/backtest/result.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd


@dataclass(frozen=True)
class BacktestResult:
    """
    BacktestResult (FINAL / FROZEN)

    Immutable facts of one run, used for:
      - metrics derivation
      - reports
      - regression / determinism checks
    """

    # -----------------------
    # Experiment identity
    # -----------------------
    name: str
    symbols: List[str]
    initial_capital: float

    # -----------------------
    # Time / event stats
    # -----------------------
    start_ts: int
    end_ts: int
    n_events: Dict[str, int]

    # -----------------------
    # Core trajectories (one row per snapshot, indexed by ts)
    # -----------------------
    holdings: pd.DataFrame
    positions: pd.DataFrame

    # -----------------------
    # Trade facts
    # -----------------------
    orders: List[Dict] = field(default_factory=list)
    fills: List[Dict] = field(default_factory=list)

    @property
    def timestamps(self) -> List[int]:
        return [int(t) for t in self.holdings.index]

    @property
    def equity_curve(self) -> List[float]:
        """cumulative compounded return per snapshot"""
        return [float(v) for v in self.holdings["equitycurve"]]

    @property
    def total_holdings(self) -> List[float]:
        return [float(v) for v in self.holdings["totalholdings"]]

    @property
    def returns(self) -> List[float]:
        return [float(v) for v in self.holdings["returns"]]
