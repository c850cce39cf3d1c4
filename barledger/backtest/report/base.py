# barledger/backtest/report/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from barledger import logs
from barledger.backtest.result import BacktestResult


class Report(ABC):
    """
    Report (FINAL / FROZEN)

    BacktestResult -> one file on disk

    Reports read the holdings / positions trajectories and trade facts
    and never feed anything back into a run. Deleting a report must not
    change any number the ledger produced.
    """

    def __init__(self, output_path) -> None:
        self.path = Path(output_path)

    @abstractmethod
    def render(self, result: BacktestResult) -> None:
        ...


class ReportPipeline:
    def __init__(self, reports: List[Report]):
        self._reports = reports

    def render_all(self, result: BacktestResult) -> List[Path]:
        """
        Render every report; returns the paths that were actually written.
        """
        written: List[Path] = []
        for r in self._reports:
            r.path.parent.mkdir(parents=True, exist_ok=True)
            r.render(result)
            if r.path.exists():
                written.append(r.path)
                logs.info(f"[Report] {type(r).__name__} -> {r.path}")
        return written
