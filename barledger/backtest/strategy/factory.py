# barledger/backtest/strategy/factory.py
from __future__ import annotations

from typing import Any, Dict, List, Type

from barledger.backtest.data.base import BarDataProvider
from barledger.backtest.strategy.base import Strategy
from barledger.backtest.strategy.buy_and_hold import BuyAndHoldStrategy
from barledger.backtest.strategy.ma_cross import MovingAverageCrossStrategy


class StrategyFactory:
    """
    StrategyFactory (FINAL / FROZEN)

    All strategies must be explicitly registered in _REGISTRY.
    No dynamic discovery or side-effect-based registration.
    """

    _REGISTRY: Dict[str, Type[Strategy]] = {
        "buy_and_hold": BuyAndHoldStrategy,
        "ma_cross": MovingAverageCrossStrategy,
    }

    # --------------------------------------------------
    @classmethod
    def create(cls, cfg: Dict[str, Any], *, bars: BarDataProvider, symbols: List[str]) -> Strategy:
        """
        cfg:
          backtest.strategy (whole dict)

        Rules:
          - cfg["type"] must exist
          - unregistered type -> crash
          - every other key is a constructor kwarg
        """
        if "type" not in cfg:
            raise KeyError("[StrategyFactory] missing 'type' in strategy config")

        typ = cfg["type"]

        if typ not in cls._REGISTRY:
            raise ValueError(f"[StrategyFactory] unknown strategy type: {typ}")

        params = {k: v for k, v in cfg.items() if k != "type"}

        return cls._REGISTRY[typ](bars=bars, symbols=symbols, **params)
