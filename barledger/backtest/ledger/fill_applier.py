from __future__ import annotations

import math

from barledger import logs
from barledger.backtest.core.errors import InvalidDirection, InvalidFill, MissingMarketData
from barledger.backtest.core.events import Direction, FillEvent
from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.ledger.ledger import Ledger
from barledger.utils.datetime_utils import DateTimeUtils

"""
{#!filepath: barledger/backtest/ledger/fill_applier.py}

FillApplier (FINAL / FROZEN)

Role:
- Book one FillEvent into the Ledger's live state.

Pricing:
- execution price = close of the latest bar for the symbol.
- the price carried on the fill is NEVER used (backtest cost estimate).

Invariants:
- cash leaving the account == cost + commission, whatever the direction
- does NOT touch History
- does NOT emit events
"""

_SIGN = {
    Direction.BUY.value: 1,
    Direction.SELL.value: -1,
}


class FillApplier:
    def __init__(
        self,
        *,
        ledger: Ledger,
        bars: BarDataProvider,
        strict_direction: bool = True,
    ) -> None:
        self.ledger = ledger
        self.bars = bars
        self.strict_direction = strict_direction

    def direction_sign(self, fill: FillEvent) -> int:
        direction = getattr(fill.direction, "value", fill.direction)
        sign = _SIGN.get(direction)

        if sign is not None:
            return sign

        if self.strict_direction:
            raise InvalidDirection(
                f"[FillApplier] unknown direction={fill.direction!r} symbol={fill.symbol} ts={fill.ts}"
            )

        logs.warning(
            f"[FillApplier] unknown direction={fill.direction!r} symbol={fill.symbol} "
            f"ts={fill.ts}, booking commission only"
        )
        return 0

    def execution_price(self, symbol: str) -> float:
        bar = self.bars.latest_bar(symbol)
        if bar is None:
            raise MissingMarketData(f"[FillApplier] no bar for symbol={symbol}")

        px = float(bar.close)
        if not math.isfinite(px):
            raise MissingMarketData(f"[FillApplier] invalid close={px} symbol={symbol} ts={bar.ts}")
        return px

    def apply_fill(self, fill: FillEvent) -> float:
        """
        Returns the cost booked (signed, commission excluded).
        """
        self.ledger.require_symbol(fill.symbol)

        if not math.isfinite(fill.quantity) or fill.quantity != int(fill.quantity):
            raise InvalidFill(f"[FillApplier] non-integral quantity={fill.quantity} symbol={fill.symbol}")
        if fill.quantity < 0:
            raise InvalidFill(f"[FillApplier] negative quantity={fill.quantity} symbol={fill.symbol}")
        if fill.commission < 0:
            raise InvalidFill(f"[FillApplier] negative commission={fill.commission} symbol={fill.symbol}")

        sign = self.direction_sign(fill)
        px = self.execution_price(fill.symbol)

        quantity = int(fill.quantity)
        cost = sign * quantity * px

        self.ledger.book_fill(
            fill.symbol,
            quantity_delta=sign * quantity,
            cost=cost,
            commission=float(fill.commission),
        )

        live = self.ledger.live
        logs.info(
            f"[FillApplier] {fill.direction} {fill.symbol} qty={quantity} px={px} "
            f"cost={cost:.2f} commission={fill.commission:.2f} "
            f"pos={live.current_positions[fill.symbol]} cash={live.heldcash:.2f} "
            f"date={DateTimeUtils.fmt(fill.ts)}"
        )
        return cost
