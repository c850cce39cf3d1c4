"""
Backtest Portfolio Core (FINAL / FROZEN)

Portfolio accounting for an event-driven bar backtest.

Core doctrine:
- There is exactly ONE ledger per run.
- Time is absolute (epoch microseconds, ts_us) and only moves forward.
- Live state evolves ONLY through fills.
- History grows ONLY at bar-close boundaries and is never rewritten.

Layer responsibilities:
- core      : defines WHAT flows between components (events, channels, errors)
- ledger    : defines WHERE positions / holdings live and HOW they change
- sizing    : defines HOW a signal becomes zero-or-one order
- data      : reference bar provider (latest N bars per symbol)
- execution : reference execution handler (orders -> fills)
- strategy  : reference strategies (bars -> signals)
- engine    : dispatches events in arrival order

The ledger, the fill applier, the time-index updater and the translator
never reorder, batch or drop events. Ordering is the dispatcher's job.
"""
