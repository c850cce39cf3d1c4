# barledger/backtest/runner.py
from __future__ import annotations

from typing import Optional

from barledger import logs
from barledger.backtest.core.channels import EventChannel, OrderChannel
from barledger.backtest.data.bars import HistoricalBarProvider
from barledger.backtest.engine import BacktestEngine
from barledger.backtest.execution.simulated import SimulatedExecutionHandler
from barledger.backtest.ledger.portfolio import NaivePortfolio
from barledger.backtest.sizing.factory import SizingPolicyFactory
from barledger.backtest.strategy.factory import StrategyFactory
from barledger.config.backtest_config import BacktestConfig
from barledger.observability.instrumentation import Instrumentation
from barledger.utils.datetime_utils import DateTimeUtils
from barledger.utils.errors import UserInputError


def build_engine(
    cfg: BacktestConfig,
    *,
    bars: Optional[HistoricalBarProvider] = None,
    inst: Optional[Instrumentation] = None,
) -> BacktestEngine:
    """
    BacktestConfig -> fully wired BacktestEngine (one run, no shared state).

    bars defaults to <cfg.csv_dir>/<SYMBOL>.csv.
    """
    if bars is None:
        if not cfg.csv_dir:
            raise UserInputError("[Runner] csv_dir is required when no bar provider is given")
        bars = HistoricalBarProvider.from_csv_dir(cfg.csv_dir, cfg.symbols)

    start_ts = DateTimeUtils.to_ts_us(cfg.start_ts)

    events = EventChannel()
    orders = OrderChannel()

    portfolio = NaivePortfolio(
        bars=bars,
        symbols=cfg.symbols,
        start_ts=start_ts,
        orders=orders,
        initial_capital=cfg.initial_capital,
        policy=SizingPolicyFactory.create(cfg.sizing.model_dump()),
        bar_alignment=cfg.bar_alignment,
        strict_direction=cfg.strict_direction,
    )

    execution = SimulatedExecutionHandler(
        bars=bars,
        commission_per_trade=cfg.commission_per_trade,
    )

    strategy = StrategyFactory.create(cfg.strategy, bars=bars, symbols=cfg.symbols)

    logs.info(
        f"[Runner] built {cfg.name} symbols={cfg.symbols} sizing={cfg.sizing.type} "
        f"strategy={cfg.strategy.get('type')} alignment={cfg.bar_alignment}"
    )

    return BacktestEngine(
        bars=bars,
        portfolio=portfolio,
        execution=execution,
        events=events,
        orders=orders,
        strategy=strategy,
        inst=inst or Instrumentation(enabled=True),
        name=cfg.name,
    )
