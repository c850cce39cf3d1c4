# barledger/backtest/report/files.py
import json

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

from barledger.backtest.report.base import Report
from barledger.backtest.result import BacktestResult
from barledger.utils.datetime_utils import DateTimeUtils


class EquityCurveReport(Report):
    """equity curve on top, per-bar returns below"""

    def render(self, result: BacktestResult) -> None:
        dates = [DateTimeUtils.parse(ts) for ts in result.timestamps]

        fig, (ax_eq, ax_ret) = plt.subplots(2, 1, figsize=(10, 6), sharex=True)
        ax_eq.plot(dates, result.equity_curve)
        ax_eq.set_title(f"Equity Curve: {result.name}")
        ax_eq.set_ylabel("Cumulative return")

        ax_ret.bar(dates, result.returns)
        ax_ret.set_xlabel("Time")
        ax_ret.set_ylabel("Period return")

        fig.tight_layout()
        fig.savefig(self.path)
        plt.close(fig)


class HoldingsReport(Report):
    def render(self, result: BacktestResult) -> None:
        df = result.holdings.copy()
        df.insert(0, "datetime", [DateTimeUtils.fmt(ts) for ts in df.index])
        df.to_csv(self.path)


class TradesReport(Report):
    def render(self, result: BacktestResult) -> None:
        if not result.fills:
            return

        df = pd.DataFrame(result.fills)
        df.insert(1, "datetime", [DateTimeUtils.fmt(ts) for ts in df["ts"]])
        df.to_csv(self.path, index=False)


class MetricsReport(Report):
    def __init__(self, metrics: dict, output_path):
        super().__init__(output_path)
        self._metrics = metrics

    def render(self, result: BacktestResult) -> None:
        payload = {"name": result.name, "symbols": result.symbols, "metrics": self._metrics}
        with open(self.path, "w") as f:
            json.dump(payload, f, indent=2)
