# tests/backtest/ledger/test_ledger.py
from __future__ import annotations

from dataclasses import FrozenInstanceError

import pandas as pd
import pytest

from barledger.backtest.core.errors import LedgerError, StaleTimestamp, UnknownSymbol
from barledger.backtest.ledger.ledger import (
    HoldingsSnapshot,
    Ledger,
    PositionSnapshot,
)


# =============================================================================
# initialize
# =============================================================================

def test_initialize_first_entry_is_flat(ledger):
    pos = ledger.positions_history.first
    hold = ledger.holdings_history.first

    assert pos.ts == 1
    assert dict(pos.positions) == {"AAA": 0, "BBB": 0}

    assert dict(hold.market_values) == {"AAA": 0.0, "BBB": 0.0}
    assert hold.heldcash == 100_000.0
    assert hold.commission == 0.0
    assert hold.totalholdings == 100_000.0
    assert hold.returns == 0.0
    assert hold.equitycurve == 0.0


def test_initialize_live_state(ledger):
    live = ledger.live

    assert dict(live.current_positions) == {"AAA": 0, "BBB": 0}
    assert dict(live.current_holdings) == {"AAA": 0.0, "BBB": 0.0}
    assert live.heldcash == live.totalholdings == 100_000.0
    assert live.commission == 0.0
    assert live.reconciles(ledger.initial_capital)


@pytest.mark.parametrize(
    "symbols, capital",
    [
        ([], 100.0),
        (["AAA", "AAA"], 100.0),
        (["AAA"], 0.0),
        (["AAA"], -5.0),
        (["AAA"], float("inf")),
    ],
)
def test_initialize_rejects_bad_input(symbols, capital):
    with pytest.raises(LedgerError):
        Ledger.initialize(symbols, start_ts=1, initial_capital=capital)


# =============================================================================
# read-only live view
# =============================================================================

def test_live_view_is_read_only(ledger):
    with pytest.raises(TypeError):
        ledger.live.current_positions["AAA"] = 5

    with pytest.raises(AttributeError):
        ledger.live.heldcash = 1.0


def test_current_quantity_unknown_symbol(ledger):
    with pytest.raises(UnknownSymbol):
        ledger.current_quantity("ZZZ")


# =============================================================================
# book_fill
# =============================================================================

def test_book_fill_moves_cash_by_cost_plus_commission(ledger):
    ledger.book_fill("AAA", quantity_delta=10, cost=500.0, commission=1.0)

    live = ledger.live
    assert live.current_positions["AAA"] == 10
    assert live.current_holdings["AAA"] == 500.0
    assert live.commission == 1.0
    assert live.heldcash == 99_499.0
    assert live.totalholdings == 99_499.0
    assert live.reconciles(ledger.initial_capital)


def test_book_fill_never_touches_history(ledger):
    ledger.book_fill("AAA", quantity_delta=10, cost=500.0, commission=1.0)

    assert len(ledger.holdings_history) == 1
    assert ledger.holdings_history.last.heldcash == 100_000.0


def test_book_fill_unknown_symbol(ledger):
    with pytest.raises(UnknownSymbol):
        ledger.book_fill("ZZZ", quantity_delta=1, cost=1.0, commission=0.0)


# =============================================================================
# record_bar / History
# =============================================================================

def _holdings(ts, total=100_000.0):
    return HoldingsSnapshot(
        ts=ts,
        market_values={"AAA": 0.0, "BBB": 0.0},
        heldcash=total,
        commission=0.0,
        totalholdings=total,
    )


def _positions(ts):
    return PositionSnapshot(ts=ts, positions={"AAA": 0, "BBB": 0})


def test_record_bar_appends_both_histories(ledger):
    ledger.record_bar(_positions(2), _holdings(2))

    assert ledger.positions_history.timestamps == [1, 2]
    assert ledger.holdings_history.timestamps == [1, 2]


def test_record_bar_rejects_same_or_older_ts(ledger):
    ledger.record_bar(_positions(5), _holdings(5))

    for ts in (5, 3):
        with pytest.raises(StaleTimestamp):
            ledger.record_bar(_positions(ts), _holdings(ts, total=1.0))

    # nothing overwritten, nothing partially appended
    assert ledger.holdings_history.last.totalholdings == 100_000.0
    assert len(ledger.positions_history) == len(ledger.holdings_history) == 2


def test_record_bar_rejects_ts_mismatch(ledger):
    with pytest.raises(LedgerError):
        ledger.record_bar(_positions(2), _holdings(3))
    assert len(ledger.positions_history) == 1


def test_snapshot_is_immutable():
    snap = _holdings(2)

    with pytest.raises(FrozenInstanceError):
        snap.totalholdings = 0.0
    with pytest.raises(TypeError):
        snap.market_values["AAA"] = 1.0


def test_snapshot_copies_input_mapping():
    values = {"AAA": 1.0}
    snap = HoldingsSnapshot(ts=1, market_values=values, heldcash=0.0, commission=0.0, totalholdings=1.0)

    values["AAA"] = 99.0
    assert snap.market_values["AAA"] == 1.0


def test_history_side_index_and_lookup(ledger):
    ledger.record_bar(
        PositionSnapshot(ts=10, positions={"AAA": 3, "BBB": 0}),
        _holdings(10),
    )
    ledger.record_bar(
        PositionSnapshot(ts=20, positions={"AAA": 5, "BBB": -2}),
        _holdings(20),
    )

    hist = ledger.positions_history
    assert hist.latest("AAA") == (20, 5)
    assert hist.latest("BBB") == (20, -2)

    assert hist.at(0) is None
    assert hist.at(15).ts == 10
    assert hist.at(20).ts == 20
    assert hist.at(99).ts == 20

    with pytest.raises(UnknownSymbol):
        hist.latest("ZZZ")


def test_history_to_frame(ledger):
    ledger.record_bar(_positions(2), _holdings(2, total=100_100.0))

    df = ledger.equity_frame()

    assert isinstance(df, pd.DataFrame)
    assert list(df.index) == [1, 2]
    assert df.index.name == "ts"
    for col in ["AAA", "BBB", "heldcash", "commission", "totalholdings", "returns", "equitycurve"]:
        assert col in df.columns
    assert df.loc[2, "totalholdings"] == 100_100.0
