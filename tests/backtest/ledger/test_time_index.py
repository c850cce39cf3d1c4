# tests/backtest/ledger/test_time_index.py
from __future__ import annotations

import pytest

from barledger.backtest.core.errors import DesynchronizedBars, MissingMarketData, StaleTimestamp
from barledger.backtest.core.events import FillEvent
from barledger.backtest.data.base import Bar
from barledger.backtest.ledger.fill_applier import FillApplier
from barledger.backtest.ledger.ledger import Ledger
from barledger.backtest.ledger.time_index import TimeIndexUpdater


@pytest.fixture
def updater(ledger, bars):
    return TimeIndexUpdater(ledger=ledger, bars=bars)


def test_single_entry_history_has_zero_returns(ledger):
    only = ledger.holdings_history.last

    assert len(ledger.holdings_history) == 1
    assert only.returns == 0.0
    assert only.equitycurve == 0.0


def test_flat_advance_keeps_capital(updater, ledger, bars):
    bars.push_all(2, {"AAA": 50.0, "BBB": 20.0})

    snap = updater.advance()

    assert snap.ts == 2
    assert snap.totalholdings == 100_000.0
    assert snap.returns == 0.0
    assert snap.equitycurve == 0.0
    assert dict(ledger.positions_history.last.positions) == {"AAA": 0, "BBB": 0}


def test_mark_to_market_and_compounding(updater, ledger, bars):
    bars.push_all(2, {"AAA": 50.0, "BBB": 20.0})
    FillApplier(ledger=ledger, bars=bars).apply_fill(
        FillEvent(ts=2, symbol="AAA", direction="BUY", quantity=10, commission=1.0)
    )

    bars.push_all(3, {"AAA": 55.0, "BBB": 21.0})
    s1 = updater.advance()

    assert dict(s1.market_values) == {"AAA": 550.0, "BBB": 0.0}
    assert s1.heldcash == pytest.approx(99_499.0)
    assert s1.commission == pytest.approx(1.0)
    assert s1.totalholdings == pytest.approx(100_049.0)
    assert s1.returns == pytest.approx(100_049.0 / 100_000.0 - 1)
    assert s1.equitycurve == pytest.approx(s1.returns)

    bars.push_all(4, {"AAA": 60.0, "BBB": 22.0})
    s2 = updater.advance()

    assert s2.totalholdings == pytest.approx(100_099.0)
    assert s2.returns == pytest.approx(100_099.0 / 100_049.0 - 1)
    assert s2.equitycurve == pytest.approx(100_099.0 / 100_000.0 - 1)


def test_equitycurve_identity_holds_for_every_entry(updater, ledger, bars):
    applier = FillApplier(ledger=ledger, bars=bars)
    closes = [50.0, 48.0, 53.5, 47.25, 61.0, 59.0, 40.0, 44.4]

    for i, close in enumerate(closes):
        ts = 2 + i
        bars.push_all(ts, {"AAA": close, "BBB": 100.0 - close})
        if i % 3 == 0:
            applier.apply_fill(
                FillEvent(ts=ts, symbol="AAA", direction="BUY", quantity=5 + i, commission=1.0)
            )
        if i % 4 == 1:
            applier.apply_fill(
                FillEvent(ts=ts, symbol="BBB", direction="SELL", quantity=3, commission=0.5)
            )
        updater.advance()

    hist = list(ledger.holdings_history)
    assert hist[0].equitycurve == 0.0

    for prev, cur in zip(hist, hist[1:]):
        assert cur.returns == pytest.approx(cur.totalholdings / prev.totalholdings - 1)
        assert cur.equitycurve == pytest.approx((prev.equitycurve + 1) * (1 + cur.returns) - 1)
        assert cur.totalholdings == pytest.approx(cur.heldcash + sum(cur.market_values.values()))


def test_advance_does_not_touch_live_state(updater, ledger, bars):
    bars.push_all(2, {"AAA": 50.0, "BBB": 20.0})
    before = (dict(ledger.live.current_positions), ledger.live.heldcash, ledger.live.totalholdings)

    updater.advance()

    after = (dict(ledger.live.current_positions), ledger.live.heldcash, ledger.live.totalholdings)
    assert before == after


def test_past_snapshots_are_not_rewritten(updater, ledger, bars):
    bars.push_all(2, {"AAA": 50.0, "BBB": 20.0})
    first = updater.advance()

    FillApplier(ledger=ledger, bars=bars).apply_fill(
        FillEvent(ts=2, symbol="AAA", direction="BUY", quantity=100, commission=0.0)
    )
    bars.push_all(3, {"AAA": 80.0, "BBB": 20.0})
    updater.advance()

    assert ledger.holdings_history[1] is first
    assert first.totalholdings == 100_000.0
    assert first.market_values["AAA"] == 0.0


def test_explicit_bars_override_provider(updater, ledger):
    snap = updater.advance(
        {
            "AAA": Bar(ts=7, open=1.0, high=1.0, low=1.0, close=10.0),
            "BBB": Bar(ts=7, open=1.0, high=1.0, low=1.0, close=20.0),
        }
    )
    assert snap.ts == 7


# =============================================================================
# failure modes
# =============================================================================

def test_missing_bar_raises(updater, ledger, bars):
    bars.push("AAA", 2, 50.0)

    with pytest.raises(MissingMarketData):
        updater.advance()
    assert len(ledger.holdings_history) == 1


def test_bar_at_start_ts_is_stale(updater, ledger, bars):
    bars.push_all(1, {"AAA": 50.0, "BBB": 20.0})

    with pytest.raises(StaleTimestamp):
        updater.advance()


def test_same_bar_twice_is_stale(updater, bars):
    bars.push_all(2, {"AAA": 50.0, "BBB": 20.0})
    updater.advance()

    with pytest.raises(StaleTimestamp):
        updater.advance()


def test_desynchronized_bars_strict(updater, bars):
    bars.push("AAA", 2, 50.0)
    bars.push("BBB", 3, 20.0)

    with pytest.raises(DesynchronizedBars):
        updater.advance()


def test_desynchronized_bars_approximate_uses_last_symbol(ledger, bars):
    updater = TimeIndexUpdater(ledger=ledger, bars=bars, bar_alignment="approximate")
    bars.push("AAA", 3, 50.0)
    bars.push("BBB", 2, 20.0)

    snap = updater.advance()

    assert snap.ts == 2
    assert ledger.positions_history.last.ts == 2


def test_unknown_alignment_rejected(ledger, bars):
    with pytest.raises(ValueError):
        TimeIndexUpdater(ledger=ledger, bars=bars, bar_alignment="loose")


def test_zero_previous_total_gives_zero_returns(bars):
    ledger = Ledger.initialize(["AAA"], start_ts=1, initial_capital=100.0)
    bars.push("AAA", 2, 10.0)
    FillApplier(ledger=ledger, bars=bars).apply_fill(
        FillEvent(ts=2, symbol="AAA", direction="BUY", quantity=10, commission=0.0)
    )
    updater = TimeIndexUpdater(ledger=ledger, bars=bars)

    bars.push("AAA", 3, 0.0)
    s1 = updater.advance()
    assert s1.totalholdings == 0.0

    bars.push("AAA", 4, 5.0)
    s2 = updater.advance()
    assert s2.returns == 0.0
    assert s2.equitycurve == pytest.approx(s1.equitycurve)
