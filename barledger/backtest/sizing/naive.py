from __future__ import annotations

import math
from typing import Optional

from barledger.backtest.core.errors import InvalidSignal
from barledger.backtest.core.events import (
    MARKET_ORDER,
    Direction,
    OrderEvent,
    SignalEvent,
    SignalType,
)
from barledger.backtest.sizing.base import SizingPolicy

_SIGNAL_TYPES = {t.value for t in SignalType}


class NaiveSizingPolicy(SizingPolicy):
    """
    Fixed-lot placeholder policy.

    target = floor(lot_size * strength)

      LONG  & flat   -> BUY  target
      SHORT & flat   -> SELL target
      EXIT  & long   -> SELL |position|
      EXIT  & short  -> BUY  |position|
      anything else  -> no order

    A strength that floors to 0 lots still emits the order (quantity 0).

    Existing exposure is never added to (no pyramiding);
    only market orders.
    """

    def __init__(self, lot_size: int = 100) -> None:
        if lot_size <= 0:
            raise ValueError(f"[NaiveSizingPolicy] lot_size must be > 0, got {lot_size}")
        self.lot_size = int(lot_size)

    def target(self, strength: float) -> int:
        return int(math.floor(self.lot_size * strength))

    def size(self, signal: SignalEvent, current_quantity: int) -> Optional[OrderEvent]:
        signal_type = getattr(signal.signal_type, "value", signal.signal_type)

        if signal_type not in _SIGNAL_TYPES:
            raise InvalidSignal(f"[NaiveSizingPolicy] unknown signal_type={signal.signal_type!r}")
        if not (0.0 <= signal.strength <= 1.0):
            raise InvalidSignal(f"[NaiveSizingPolicy] strength={signal.strength} outside [0, 1]")

        if signal_type == SignalType.LONG.value and current_quantity == 0:
            return self._order(signal, self.target(signal.strength), Direction.BUY)

        if signal_type == SignalType.SHORT.value and current_quantity == 0:
            return self._order(signal, self.target(signal.strength), Direction.SELL)

        if signal_type == SignalType.EXIT.value and current_quantity > 0:
            return self._order(signal, abs(current_quantity), Direction.SELL)

        if signal_type == SignalType.EXIT.value and current_quantity < 0:
            return self._order(signal, abs(current_quantity), Direction.BUY)

        return None

    @staticmethod
    def _order(signal: SignalEvent, quantity: int, direction: Direction) -> OrderEvent:
        # a target that floors to 0 still goes out as a 0-lot market order
        return OrderEvent(
            ts=signal.ts,
            symbol=signal.symbol,
            quantity=quantity,
            direction=direction.value,
            order_type=MARKET_ORDER,
        )
