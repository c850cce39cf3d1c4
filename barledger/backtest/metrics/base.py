from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict

import numpy as np

from barledger.backtest.result import BacktestResult


class MetricsCollector(ABC):
    """
    MetricsCollector (FINAL)

    BacktestResult -> metrics dict

    Metrics are pure functions of BacktestResult.
    They never re-derive anything from fills: the holdings
    history is the single source.
    """

    @abstractmethod
    def compute(self, result: BacktestResult) -> Dict[str, float]:
        ...


def drawdowns(equitycurve: np.ndarray) -> tuple[float, int]:
    """
    Max drawdown (fraction of the high-water mark) and the longest
    stretch, in periods, spent below a previous high.
    """
    if equitycurve.size == 0:
        return 0.0, 0

    wealth = 1.0 + equitycurve
    hwm = np.maximum.accumulate(wealth)
    dd = np.where(hwm > 0, 1.0 - wealth / hwm, 0.0)

    duration = 0
    longest = 0
    for under in dd > 0:
        duration = duration + 1 if under else 0
        longest = max(longest, duration)

    return float(dd.max()), longest


class BasicMetrics(MetricsCollector):
    def __init__(self, periods: int = 252) -> None:
        self.periods = periods

    def compute(self, result: BacktestResult) -> Dict[str, float]:
        curve = np.asarray(result.equity_curve, dtype=float)
        # first snapshot has no period return
        ret = np.asarray(result.returns[1:], dtype=float)

        std = ret.std() if ret.size else 0.0
        sharpe = np.sqrt(self.periods) * ret.mean() / std if std > 0 else 0.0

        max_dd, dd_duration = drawdowns(curve)

        return {
            "final_total": float(result.total_holdings[-1]),
            "total_return": float(curve[-1]) if curve.size else 0.0,
            "sharpe": float(sharpe),
            "max_drawdown": max_dd,
            "drawdown_duration": float(dd_duration),
        }


class TradeMetrics(MetricsCollector):
    def compute(self, result: BacktestResult) -> Dict[str, float]:
        commission = float(result.holdings["commission"].iloc[-1]) if len(result.holdings) else 0.0
        return {
            "n_orders": float(len(result.orders)),
            "n_fills": float(len(result.fills)),
            "commission": commission,
        }


class MetricsPipeline:
    def __init__(self, collectors: list[MetricsCollector]):
        self._collectors = collectors

    def compute(self, result: BacktestResult) -> Dict[str, float]:
        metrics = {}
        for c in self._collectors:
            metrics.update(c.compute(result))
        return metrics
