"""
Core World Model (FINAL / FROZEN)

Defines WHAT flows through a backtest, independent of any engine.

Invariants:
- Time is represented as ts_us (epoch microseconds).
- Events (Market, Signal, Order, Fill) are immutable facts.
- Inbound events and outbound orders travel on separate channels.
- Every failure in the core is a LedgerError and is fatal for the run.

Core explicitly does NOT:
- Perform IO or data loading
- Contain strategy or execution logic
- Decide how or when time advances
"""
