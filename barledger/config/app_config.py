#!filepath: barledger/config/app_config.py
import os

import yaml
from pydantic import BaseModel
from dotenv import load_dotenv

from .log_config import LogConfig
from .backtest_config import BacktestConfig


def project_root() -> str:
    """
    Project root, derived from this file:
    barledger/config/app_config.py -> barledger/config -> barledger -> root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


class AppConfig(BaseModel):
    log: LogConfig = LogConfig()
    backtest: BacktestConfig

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        Load YAML config + .env
        - defaults to barledger/config/base.yml
        - BARLEDGER_LOG_LEVEL overrides log.level
        """
        root = project_root()

        load_dotenv(os.path.join(root, ".env"))

        if path is None:
            path = os.path.join(os.path.dirname(__file__), "base.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        level = os.getenv("BARLEDGER_LOG_LEVEL")
        if level:
            raw.setdefault("log", {})["level"] = level.upper()

        return cls(**raw)
