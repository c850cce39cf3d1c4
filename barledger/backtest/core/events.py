# barledger/backtest/core/events.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    MARKET = "MARKET"
    SIGNAL = "SIGNAL"
    ORDER = "ORDER"
    FILL = "FILL"


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class SignalType(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    EXIT = "EXIT"


MARKET_ORDER = "MKT"


# -------------------------
# Base
# -------------------------
class Event:
    type: EventType


# -------------------------
# Market
# -------------------------
@dataclass(frozen=True)
class MarketEvent(Event):
    """
    A bar-close boundary. Prices are read from the bar provider,
    not carried on the event.
    """
    ts: int

    type = EventType.MARKET


# -------------------------
# Signal
# -------------------------
@dataclass(frozen=True)
class SignalEvent(Event):
    ts: int
    symbol: str
    signal_type: str      # LONG / SHORT / EXIT
    strength: float = 1.0  # [0, 1]

    type = EventType.SIGNAL


# -------------------------
# Order
# -------------------------
@dataclass(frozen=True)
class OrderEvent(Event):
    ts: int
    symbol: str
    quantity: int
    direction: str        # BUY / SELL
    order_type: str = MARKET_ORDER

    type = EventType.ORDER


# -------------------------
# Fill
# -------------------------
@dataclass(frozen=True)
class FillEvent(Event):
    """
    direction stays a plain string: a misrecorded fill must reach
    the FillApplier so it can be rejected there.
    """
    ts: int
    symbol: str
    direction: str        # BUY / SELL
    quantity: int
    commission: float = 0.0
    fill_price: Optional[float] = None  # informational, never used for cost
    exchange: str = ""

    type = EventType.FILL
