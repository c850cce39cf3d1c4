# barledger/backtest/ledger/portfolio.py
from __future__ import annotations

from typing import Iterable, Optional

from barledger.backtest.core.channels import OrderChannel
from barledger.backtest.core.events import FillEvent, MarketEvent, OrderEvent, SignalEvent
from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.ledger.base import Portfolio
from barledger.backtest.ledger.fill_applier import FillApplier
from barledger.backtest.ledger.ledger import HoldingsSnapshot, Ledger
from barledger.backtest.ledger.time_index import Alignment, TimeIndexUpdater
from barledger.backtest.sizing.base import SizingPolicy
from barledger.backtest.sizing.naive import NaiveSizingPolicy
from barledger.backtest.sizing.translator import SignalToOrderTranslator


class NaivePortfolio(Portfolio):
    """
    NaivePortfolio (FINAL)

    Wires the four core components of one run:

      MarketEvent -> TimeIndexUpdater.advance()
      FillEvent   -> FillApplier.apply_fill()
      SignalEvent -> SignalToOrderTranslator.translate() -> orders channel

    Holds no state of its own; everything lives in the Ledger.
    """

    def __init__(
        self,
        *,
        bars: BarDataProvider,
        symbols: Iterable[str],
        start_ts: int,
        orders: OrderChannel,
        initial_capital: float = 100_000.0,
        policy: Optional[SizingPolicy] = None,
        bar_alignment: Alignment = "strict",
        strict_direction: bool = True,
    ) -> None:
        self.bars = bars
        self.orders = orders
        self.ledger = Ledger.initialize(symbols, start_ts, initial_capital)

        self.time_index = TimeIndexUpdater(
            ledger=self.ledger,
            bars=bars,
            bar_alignment=bar_alignment,
        )
        self.fills = FillApplier(
            ledger=self.ledger,
            bars=bars,
            strict_direction=strict_direction,
        )
        self.translator = SignalToOrderTranslator(
            ledger=self.ledger,
            policy=policy or NaiveSizingPolicy(),
            orders=orders,
        )

    # --------------------------------------------------
    # Event handlers
    # --------------------------------------------------
    def on_market(self, event: MarketEvent) -> HoldingsSnapshot:
        return self.time_index.advance()

    def on_signal(self, signal: SignalEvent) -> OrderEvent | None:
        return self.translator.translate(signal)

    def on_fill(self, fill: FillEvent) -> None:
        self.fills.apply_fill(fill)

    # --------------------------------------------------
    # Reporting surface
    # --------------------------------------------------
    @property
    def holdings_history(self):
        return self.ledger.holdings_history

    @property
    def positions_history(self):
        return self.ledger.positions_history

    def equity_frame(self):
        return self.ledger.equity_frame()
