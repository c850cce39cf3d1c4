from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class SizingConfig(BaseModel):
    """
    Which SizingPolicy turns signals into orders.

    `type` is looked up in SizingPolicyFactory._REGISTRY;
    `params` are passed to the policy constructor untouched.
    """

    type: str = "naive"
    params: Dict[str, Any] = Field(default_factory=dict)


class BacktestConfig(BaseModel):
    """
    BacktestConfig (FROZEN)

    One run = one symbol universe, one start timestamp, one capital.
    Paths are optional: the core only needs symbols / start_ts / capital.

    CSV inputs must start on the same bar for every symbol, and with
    bar_alignment="strict" must share every timestamp: a late start fails
    the first bar-close with MissingMarketData, a gap fails with
    DesynchronizedBars.
    """

    name: str = "default"

    symbols: List[str] = Field(..., min_length=1)

    # first History entry; epoch microseconds or anything pandas parses
    start_ts: int | str

    initial_capital: float = Field(100_000.0, gt=0)

    # "strict": every bar-close cycle must share one timestamp
    # "approximate": key the snapshot by the last symbol's bar
    bar_alignment: Literal["strict", "approximate"] = "strict"

    # unknown fill direction -> InvalidDirection (True) or sign 0 (False)
    strict_direction: bool = True

    sizing: SizingConfig = Field(default_factory=SizingConfig)

    # strategy config (opaque, resolved by StrategyFactory)
    strategy: Dict[str, Any] = Field(default_factory=lambda: {"type": "buy_and_hold"})

    commission_per_trade: float = Field(0.0, ge=0)

    csv_dir: Optional[str] = None
    output_dir: Optional[str] = None

    @field_validator("symbols")
    @classmethod
    def _unique_symbols(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"duplicate symbols: {v}")
        return v
