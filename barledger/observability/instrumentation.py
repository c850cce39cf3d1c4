#!filepath: barledger/observability/instrumentation.py
from __future__ import annotations

import time
from collections import Counter, OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator

from barledger import logs


@dataclass
class Instrumentation:
    """
    Run-level instrumentation for one backtest.

    - counters : events seen per kind (MARKET / SIGNAL / ORDER / FILL)
    - timeline : named wall-clock scopes, in the order they closed
    Nothing is logged on the hot path; summary() logs once at the end.
    """

    enabled: bool = True
    counters: Counter = field(default_factory=Counter)
    timeline: Dict[str, float] = field(default_factory=OrderedDict)

    def count(self, name: str, n: int = 1) -> None:
        if not self.enabled:
            return
        self.counters[name] += n

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            self.timeline[name] = self.timeline.get(name, 0.0) + time.perf_counter() - start

    def summary(self, title: str) -> None:
        if not self.enabled:
            return

        logs.info(f"[Timeline] ===== {title} =====")
        for name, n in sorted(self.counters.items()):
            logs.info(f"[Counter] {name:<24} {n:>10d}")

        total = 0.0
        for name, sec in self.timeline.items():
            logs.info(f"[Timeline] {name:<24} {sec:>8.3f}s")
            total += sec
        logs.info(f"[Timeline] Total{'':<19} {total:>8.3f}s")
