# barledger/backtest/sizing/factory.py
from __future__ import annotations

from typing import Any, Dict, Type

from barledger.backtest.sizing.base import SizingPolicy
from barledger.backtest.sizing.naive import NaiveSizingPolicy


class SizingPolicyFactory:
    """
    SizingPolicyFactory (FINAL / FROZEN)

    Registration is centralized and static:
    a new policy is added here, in _REGISTRY, and nowhere else.
    """

    _REGISTRY: Dict[str, Type[SizingPolicy]] = {
        "naive": NaiveSizingPolicy,
    }

    # --------------------------------------------------
    @classmethod
    def create(cls, cfg: Dict[str, Any]) -> SizingPolicy:
        """
        cfg:
          {"type": "naive", "params": {"lot_size": 100}}

        Rules:
          - cfg["type"] must exist
          - unregistered type -> crash
        """
        if "type" not in cfg:
            raise KeyError("[SizingPolicyFactory] missing 'type' in sizing config")

        typ = cfg["type"]

        if typ not in cls._REGISTRY:
            raise ValueError(f"[SizingPolicyFactory] unknown sizing type: {typ}")

        return cls._REGISTRY[typ](**dict(cfg.get("params") or {}))
