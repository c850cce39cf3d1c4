from __future__ import annotations

from typing import Optional

from barledger import logs
from barledger.backtest.core.channels import OrderChannel
from barledger.backtest.core.events import OrderEvent, SignalEvent
from barledger.backtest.ledger.ledger import Ledger
from barledger.backtest.sizing.base import SizingPolicy

"""
{#!filepath: barledger/backtest/sizing/translator.py}

SignalToOrderTranslator (FINAL / FROZEN)

Role:
- SignalEvent -> zero-or-one OrderEvent on the outbound channel.

Invariants:
- Reads the Ledger, never writes it.
- Sizing is delegated to a SizingPolicy.
- At most one order per signal.
"""


class SignalToOrderTranslator:
    def __init__(
        self,
        *,
        ledger: Ledger,
        policy: SizingPolicy,
        orders: OrderChannel,
    ) -> None:
        self.ledger = ledger
        self.policy = policy
        self.orders = orders

    def translate(self, signal: SignalEvent) -> Optional[OrderEvent]:
        current = self.ledger.current_quantity(signal.symbol)
        order = self.policy.size(signal, current)

        if order is None:
            logs.debug(
                f"[Translator] no order signal={signal.signal_type} symbol={signal.symbol} "
                f"strength={signal.strength} cur={current}"
            )
            return None

        self.orders.put(order)
        logs.info(
            f"[Translator] {order.direction} {order.symbol} qty={order.quantity} "
            f"type={order.order_type} cur={current} signal={signal.signal_type}"
        )
        return order
