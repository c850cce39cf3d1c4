#!filepath: barledger/cli.py
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.table import Table

from barledger import __version__, init_logging
from barledger.backtest.engine import summarize_counts
from barledger.backtest.metrics.base import BasicMetrics, MetricsPipeline, TradeMetrics
from barledger.backtest.report.base import ReportPipeline
from barledger.backtest.report.files import (
    EquityCurveReport,
    HoldingsReport,
    MetricsReport,
    TradesReport,
)
from barledger.backtest.runner import build_engine
from barledger.config.app_config import AppConfig
from barledger.utils.datetime_utils import DateTimeUtils
from barledger.utils.errors import UserInputError

app = typer.Typer(help="barledger event-driven backtest CLI")


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config (default: bundled base.yml)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="write reports into this directory"),
    tail: int = typer.Option(5, help="equity curve rows to show"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="also log to stderr"),
):
    """
    Run one bar backtest from CSV files.
    """
    cfg = AppConfig.load(str(config) if config else None)
    init_logging(cfg.log, console=verbose)

    bt = cfg.backtest
    print(f"[green]Running backtest {bt.name} on {', '.join(bt.symbols)}[/green]")

    try:
        result = build_engine(bt).run()
    except UserInputError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    metrics = MetricsPipeline([BasicMetrics(), TradeMetrics()]).compute(result)

    table = Table(title=f"Metrics: {bt.name}")
    table.add_column("metric")
    table.add_column("value", justify="right")
    for k, v in metrics.items():
        table.add_row(k, f"{v:,.4f}")
    for k, v in summarize_counts(result).items():
        table.add_row(f"events.{k}", str(v))
    print(table)

    curve = result.holdings[["totalholdings", "returns", "equitycurve"]].tail(tail).copy()
    curve.index = [DateTimeUtils.fmt(ts) for ts in curve.index]
    print(curve)

    out_dir = output or (Path(bt.output_dir) if bt.output_dir else None)
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)
        ReportPipeline(
            [
                EquityCurveReport(out_dir / "equity_curve.png"),
                HoldingsReport(out_dir / "holdings.csv"),
                TradesReport(out_dir / "fills.csv"),
                MetricsReport(metrics, out_dir / "metrics.json"),
            ]
        ).render_all(result)
        print(f"[blue]Reports written to {out_dir}[/blue]")


if __name__ == "__main__":
    app()

# python -m barledger.cli run --config barledger/config/base.yml
