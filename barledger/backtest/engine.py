# barledger/backtest/engine.py
from __future__ import annotations

from collections import Counter
from dataclasses import asdict
from typing import Dict, Iterable, List, Optional

from barledger import logs
from barledger.backtest.core.channels import EventChannel, OrderChannel
from barledger.backtest.core.events import Event, EventType, FillEvent, OrderEvent
from barledger.backtest.data.bars import HistoricalBarProvider
from barledger.backtest.execution.base import ExecutionHandler
from barledger.backtest.ledger.portfolio import NaivePortfolio
from barledger.backtest.result import BacktestResult
from barledger.backtest.strategy.base import Strategy
from barledger.observability.instrumentation import Instrumentation


class BacktestEngine:
    """
    BacktestEngine (FROZEN)

    The dispatcher. Delivers events to the portfolio core strictly in
    arrival order:

        inbound  : MARKET -> time index, strategy signals
                   SIGNAL -> translator (orders go outbound)
                   FILL   -> fill applier
        outbound : ORDER  -> execution handler -> FILL back inbound

    Orders emitted while handling an event are routed before the next
    inbound event is taken, so a fill always lands before the next
    bar-close.
    """

    def __init__(
        self,
        *,
        bars: HistoricalBarProvider,
        portfolio: NaivePortfolio,
        execution: ExecutionHandler,
        events: EventChannel,
        orders: OrderChannel,
        strategy: Optional[Strategy] = None,
        inst: Optional[Instrumentation] = None,
        name: str = "backtest",
    ) -> None:
        self.bars = bars
        self.portfolio = portfolio
        self.execution = execution
        self.events = events
        self.orders = orders
        self.strategy = strategy
        self.inst = inst or Instrumentation(enabled=False)
        self.name = name

        self.counts: Counter = Counter()
        self._orders: List[OrderEvent] = []
        self._fills: List[FillEvent] = []

    # --------------------------------------------------
    @logs.catch("backtest run failed")
    def run(self) -> BacktestResult:
        logs.info(f"[Engine] ====== START {self.name} ======")

        with self.inst.timer("replay"):
            while self.bars.continue_backtest:
                self.bars.update_bars(self.events)
                self.process_pending()

        result = self.result()

        self.inst.summary(self.name)
        logs.info(
            f"[Engine] ====== DONE {self.name} snapshots={len(result.holdings)} "
            f"final_total={result.total_holdings[-1]:.2f} ======"
        )
        return result

    def feed(self, events: Iterable[Event]) -> None:
        """
        Deliver synthetic events without a bar replay (tests, replays).
        """
        for event in events:
            self.events.put(event)
            self.process_pending()

    # --------------------------------------------------
    def process_pending(self) -> None:
        for event in self.events.drain():
            self.dispatch(event)
            self.route_orders()

    def dispatch(self, event: Event) -> None:
        kind = event.type
        self.counts[kind.value] += 1
        self.inst.count(kind.value)

        if kind == EventType.MARKET:
            self.portfolio.on_market(event)
            if self.strategy is not None:
                for signal in self.strategy.on_market(event):
                    self.events.put(signal)

        elif kind == EventType.SIGNAL:
            self.portfolio.on_signal(event)

        elif kind == EventType.FILL:
            self.portfolio.on_fill(event)
            self._fills.append(event)

        else:
            raise ValueError(f"[Engine] unexpected inbound event type={kind}")

    def route_orders(self) -> None:
        for order in self.orders.drain():
            self.counts[EventType.ORDER.value] += 1
            self.inst.count(EventType.ORDER.value)
            self._orders.append(order)

            fill = self.execution.on_order(order)
            if fill is not None:
                self.events.put(fill)

    # --------------------------------------------------
    def result(self) -> BacktestResult:
        ledger = self.portfolio.ledger
        return BacktestResult(
            name=self.name,
            symbols=list(ledger.symbols),
            initial_capital=ledger.initial_capital,
            start_ts=ledger.start_ts,
            end_ts=ledger.holdings_history.last.ts,
            n_events=dict(self.counts),
            holdings=ledger.holdings_history.to_frame(),
            positions=ledger.positions_history.to_frame(),
            orders=[asdict(o) for o in self._orders],
            fills=[asdict(f) for f in self._fills],
        )


def summarize_counts(result: BacktestResult) -> Dict[str, int]:
    return {k: result.n_events.get(k, 0) for k in (t.value for t in EventType)}
