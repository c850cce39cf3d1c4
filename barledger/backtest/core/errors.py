# barledger/backtest/core/errors.py
from __future__ import annotations


class LedgerError(RuntimeError):
    """
    Base class for every failure raised by the portfolio core.

    A LedgerError is fatal for the enclosing backtest run:
    ledger consistency is a precondition for returns, equity curve
    and order decisions, so nothing downstream may continue.
    """


class UnknownSymbol(LedgerError):
    """Symbol is not part of the ledger's universe."""


class InvalidDirection(LedgerError):
    """Fill direction is neither BUY nor SELL."""


class InvalidFill(LedgerError):
    """Negative quantity or commission on a fill."""


class InvalidSignal(LedgerError):
    """Unknown signal type or strength outside [0, 1]."""


class MissingMarketData(LedgerError):
    """No bar is available for a symbol when a price is needed."""


class DesynchronizedBars(LedgerError):
    """Symbols' latest bars disagree on the timestamp of a bar-close cycle."""


class StaleTimestamp(LedgerError):
    """A snapshot would be appended at or before the last recorded timestamp."""
