from __future__ import annotations

from barledger import logs
from barledger.backtest.core.events import MARKET_ORDER, FillEvent, OrderEvent
from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.execution.base import ExecutionHandler
from barledger.utils.datetime_utils import DateTimeUtils

"""
{#!filepath: barledger/backtest/execution/simulated.py}

SimulatedExecutionHandler (FINAL)

Assumptions:
- Idealized execution.
- Market orders only, always filled in full.
- No slippage, no latency, flat commission per trade.

Invariants:
- Does NOT mutate the portfolio.
- Emits ONLY immutable FillEvents.
- If no bar is observable -> no fill.
"""


class SimulatedExecutionHandler(ExecutionHandler):
    def __init__(
        self,
        *,
        bars: BarDataProvider,
        commission_per_trade: float = 0.0,
        exchange: str = "SIM",
    ) -> None:
        self.bars = bars
        self.commission = commission_per_trade
        self.exchange = exchange

    def on_order(self, order: OrderEvent) -> FillEvent | None:
        if order.order_type != MARKET_ORDER:
            logs.warning(f"[Execution] skip unsupported order_type={order.order_type} symbol={order.symbol}")
            return None

        bar = self.bars.latest_bar(order.symbol)
        if bar is None:
            logs.info(f"[Execution] skip, no bar symbol={order.symbol} ts={order.ts}")
            return None

        logs.info(
            f"[Execution] {order.direction} {order.symbol} qty={order.quantity} "
            f"price={bar.close} date={DateTimeUtils.fmt(bar.ts)}"
        )

        return FillEvent(
            ts=bar.ts,
            symbol=order.symbol,
            direction=order.direction,
            quantity=order.quantity,
            commission=self.commission,
            fill_price=bar.close,
            exchange=self.exchange,
        )
