# barledger/backtest/ledger/ledger.py
from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar

import pandas as pd

from barledger import logs
from barledger.backtest.core.errors import LedgerError, StaleTimestamp, UnknownSymbol

# reconciliation tolerance for float bookkeeping
EPS = 1e-6


# =============================================================================
# Live state
# =============================================================================

@dataclass
class LiveState:
    """
    The single current (not historical) record of the portfolio.

    current_holdings carries the signed cost booked per symbol, so the
    live accounts reconcile as:
        totalholdings == heldcash
        heldcash + sum(current_holdings) + commission == initial_capital
    Market value only appears in History, at bar-close.
    """

    current_positions: Dict[str, int]
    current_holdings: Dict[str, float]
    heldcash: float
    commission: float
    totalholdings: float

    @classmethod
    def flat(cls, symbols: Iterable[str], initial_capital: float) -> "LiveState":
        symbols = list(symbols)
        return cls(
            current_positions={s: 0 for s in symbols},
            current_holdings={s: 0.0 for s in symbols},
            heldcash=float(initial_capital),
            commission=0.0,
            totalholdings=float(initial_capital),
        )

    def booked_cost(self) -> float:
        return sum(self.current_holdings.values())

    def reconciles(self, initial_capital: float, tol: float = EPS) -> bool:
        if not math.isclose(self.totalholdings, self.heldcash, abs_tol=tol):
            return False
        booked = self.heldcash + self.booked_cost() + self.commission
        return math.isclose(booked, initial_capital, rel_tol=1e-12, abs_tol=tol)


class LiveStateView:
    """
    Read-only window on LiveState handed out by Ledger.live.
    """

    __slots__ = ("_state",)

    def __init__(self, state: LiveState) -> None:
        self._state = state

    @property
    def current_positions(self) -> Mapping[str, int]:
        return MappingProxyType(self._state.current_positions)

    @property
    def current_holdings(self) -> Mapping[str, float]:
        return MappingProxyType(self._state.current_holdings)

    @property
    def heldcash(self) -> float:
        return self._state.heldcash

    @property
    def commission(self) -> float:
        return self._state.commission

    @property
    def totalholdings(self) -> float:
        return self._state.totalholdings

    def booked_cost(self) -> float:
        return self._state.booked_cost()

    def reconciles(self, initial_capital: float, tol: float = EPS) -> bool:
        return self._state.reconciles(initial_capital, tol)

    def __repr__(self) -> str:
        s = self._state
        return (
            f"LiveStateView(positions={s.current_positions}, heldcash={s.heldcash:.2f}, "
            f"commission={s.commission:.2f}, totalholdings={s.totalholdings:.2f})"
        )


# =============================================================================
# Snapshots (immutable)
# =============================================================================

@dataclass(frozen=True)
class PositionSnapshot:
    ts: int
    positions: Mapping[str, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", MappingProxyType(dict(self.positions)))

    @property
    def per_symbol(self) -> Mapping[str, int]:
        return self.positions

    def record(self) -> Dict[str, float]:
        return dict(self.positions)


@dataclass(frozen=True)
class HoldingsSnapshot:
    """
    Point-in-time valuation: cash plus positions marked to market.
    """

    ts: int
    market_values: Mapping[str, float]
    heldcash: float
    commission: float
    totalholdings: float
    returns: float = 0.0
    equitycurve: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "market_values", MappingProxyType(dict(self.market_values)))

    @property
    def per_symbol(self) -> Mapping[str, float]:
        return self.market_values

    def record(self) -> Dict[str, float]:
        row: Dict[str, float] = dict(self.market_values)
        row.update(
            heldcash=self.heldcash,
            commission=self.commission,
            totalholdings=self.totalholdings,
            returns=self.returns,
            equitycurve=self.equitycurve,
        )
        return row


S = TypeVar("S", PositionSnapshot, HoldingsSnapshot)


# =============================================================================
# History: append-only log + per-symbol side index
# =============================================================================

class History(Generic[S]):
    """
    History (FROZEN)

    Append-only ordered log of snapshots keyed by strictly ascending ts.

    Invariants:
      - append() never overwrites: ts <= last ts -> StaleTimestamp
      - side index symbol -> (ts, value) of its latest entry, O(1) lookup
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: List[S] = []
        self._ts: List[int] = []
        self._latest: Dict[str, Tuple[int, float]] = {}

    # --------------------------------------------------
    def check_appendable(self, ts: int) -> None:
        if self._ts and ts <= self._ts[-1]:
            raise StaleTimestamp(
                f"[History:{self.name}] ts={ts} not after last ts={self._ts[-1]}"
            )

    def append(self, snapshot: S) -> S:
        self.check_appendable(snapshot.ts)

        self._entries.append(snapshot)
        self._ts.append(snapshot.ts)
        for symbol, value in snapshot.per_symbol.items():
            self._latest[symbol] = (snapshot.ts, value)

        return snapshot

    # --------------------------------------------------
    # read access
    # --------------------------------------------------
    @property
    def last(self) -> S:
        if not self._entries:
            raise LedgerError(f"[History:{self.name}] empty")
        return self._entries[-1]

    @property
    def first(self) -> S:
        if not self._entries:
            raise LedgerError(f"[History:{self.name}] empty")
        return self._entries[0]

    @property
    def timestamps(self) -> List[int]:
        return list(self._ts)

    def latest(self, symbol: str) -> Tuple[int, float]:
        try:
            return self._latest[symbol]
        except KeyError:
            raise UnknownSymbol(f"[History:{self.name}] no entry for symbol={symbol}") from None

    def at(self, ts: int) -> Optional[S]:
        """
        Snapshot in force at ts (last entry with entry.ts <= ts).
        """
        i = bisect_right(self._ts, ts)
        if i == 0:
            return None
        return self._entries[i - 1]

    def to_frame(self) -> pd.DataFrame:
        """
        One row per snapshot, indexed by ts (epoch microseconds).
        """
        df = pd.DataFrame(
            [e.record() for e in self._entries],
            index=pd.Index(self._ts, name="ts", dtype="int64"),
        )
        return df

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[S]:
        return iter(self._entries)

    def __getitem__(self, i: int) -> S:
        return self._entries[i]

    def __repr__(self) -> str:
        return f"History(name={self.name!r}, n={len(self)})"


# =============================================================================
# Ledger
# =============================================================================

class Ledger:
    """
    Ledger (FINAL / FROZEN)

    Owns the live state and both histories of ONE backtest run.

    Mutation entry points (the only ones):
      - book_fill()   : called by FillApplier
      - record_bar()  : called by TimeIndexUpdater

    Everything else is read-only.
    """

    def __init__(
        self,
        *,
        symbols: Tuple[str, ...],
        start_ts: int,
        initial_capital: float,
    ) -> None:
        self._symbols = symbols
        self._start_ts = int(start_ts)
        self._initial_capital = float(initial_capital)

        self._live = LiveState.flat(symbols, initial_capital)
        self._positions: History[PositionSnapshot] = History("positions")
        self._holdings: History[HoldingsSnapshot] = History("holdings")

        self._positions.append(
            PositionSnapshot(ts=self._start_ts, positions={s: 0 for s in symbols})
        )
        self._holdings.append(
            HoldingsSnapshot(
                ts=self._start_ts,
                market_values={s: 0.0 for s in symbols},
                heldcash=self._initial_capital,
                commission=0.0,
                totalholdings=self._initial_capital,
            )
        )

    @classmethod
    def initialize(
        cls,
        symbols: Iterable[str],
        start_ts: int,
        initial_capital: float = 100_000.0,
    ) -> "Ledger":
        symbols = tuple(symbols)

        if not symbols:
            raise LedgerError("[Ledger] empty symbol universe")
        if len(set(symbols)) != len(symbols):
            raise LedgerError(f"[Ledger] duplicate symbols: {symbols}")
        if not (initial_capital > 0 and math.isfinite(initial_capital)):
            raise LedgerError(f"[Ledger] invalid initial_capital={initial_capital}")

        ledger = cls(symbols=symbols, start_ts=start_ts, initial_capital=initial_capital)
        logs.info(
            f"[Ledger] initialized symbols={list(symbols)} start_ts={start_ts} "
            f"capital={initial_capital:.2f}"
        )
        return ledger

    # --------------------------------------------------
    # read access
    # --------------------------------------------------
    @property
    def symbols(self) -> Tuple[str, ...]:
        return self._symbols

    @property
    def start_ts(self) -> int:
        return self._start_ts

    @property
    def initial_capital(self) -> float:
        return self._initial_capital

    @property
    def live(self) -> LiveStateView:
        return LiveStateView(self._live)

    @property
    def positions_history(self) -> History[PositionSnapshot]:
        return self._positions

    @property
    def holdings_history(self) -> History[HoldingsSnapshot]:
        return self._holdings

    def require_symbol(self, symbol: str) -> None:
        if symbol not in self._live.current_positions:
            raise UnknownSymbol(f"[Ledger] unknown symbol={symbol}")

    def current_quantity(self, symbol: str) -> int:
        self.require_symbol(symbol)
        return self._live.current_positions[symbol]

    def equity_frame(self) -> pd.DataFrame:
        return self._holdings.to_frame()

    # --------------------------------------------------
    # mutation entry points
    # --------------------------------------------------
    def book_fill(
        self,
        symbol: str,
        *,
        quantity_delta: int,
        cost: float,
        commission: float,
    ) -> None:
        self.require_symbol(symbol)

        live = self._live
        live.current_positions[symbol] += quantity_delta
        live.current_holdings[symbol] += cost
        live.commission += commission
        live.heldcash -= cost + commission
        live.totalholdings -= cost + commission

    def record_bar(
        self,
        positions: PositionSnapshot,
        holdings: HoldingsSnapshot,
    ) -> HoldingsSnapshot:
        """
        Append one bar-close cycle to both histories, all or nothing.
        """
        if positions.ts != holdings.ts:
            raise LedgerError(
                f"[Ledger] snapshot ts mismatch positions={positions.ts} holdings={holdings.ts}"
            )

        self._positions.check_appendable(positions.ts)
        self._holdings.check_appendable(holdings.ts)

        self._positions.append(positions)
        return self._holdings.append(holdings)

    def __repr__(self) -> str:
        return (
            f"Ledger(symbols={list(self._symbols)}, n_snapshots={len(self._holdings)}, "
            f"live={self.live!r})"
        )
