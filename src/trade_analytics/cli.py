"""CLI entry point for the trade analytics engine."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import click

from .analytics.engine import AnalyticsEngine, AnalyticsRequest, AnalyticsView
from .analytics.export import AnalyticsExporter
from .analytics.filters import TradeFilter, preset_range
from .analytics.store import JsonTradeStore
from .core.config import load_settings
from .core.enums import ExecutionFilter, RangePreset, StatSet, ViewMode
from .core.errors import AnalyticsError
from .observability.logger import setup_logging


_COMMON_OPTIONS = [
    click.option("--trades", "trades_path", required=True,
                 type=click.Path(dir_okay=False, path_type=Path),
                 help="Trade file (JSON array, {'trades': [...]} object, or .jsonl)"),
    click.option("--balance", type=float, default=None,
                 help="Account balance (defaults to the balance stored in the trade file)"),
    click.option("--config", "config_path", default=None, help="Config file path (TOML)"),
    click.option("--account", "account_id", default=None, help="Only trades of this account"),
    click.option("--year", type=int, default=None, help="Calendar year (yearly view)"),
    click.option("--market", default="all", help="Market filter, 'all' for every market"),
    click.option("--execution", type=click.Choice([e.value for e in ExecutionFilter]),
                 default=ExecutionFilter.ALL.value, help="Execution filter"),
    click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
                 help="Start date (YYYY-MM-DD), inclusive"),
    click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
                 help="End date (YYYY-MM-DD), inclusive"),
    click.option("--preset", type=click.Choice([p.value for p in RangePreset]), default=None,
                 help="Date range preset relative to today"),
    click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
                 help="Write to this file instead of stdout"),
    click.option("--log-level", default=None, help="Override the configured log level"),
]


def _common_options(func):
    """Options shared by every report command."""
    for option in reversed(_COMMON_OPTIONS):
        func = option(func)
    return func


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def _run(
    stat_sets: set[StatSet],
    *,
    trades_path: Path,
    balance: float | None,
    config_path: str | None,
    account_id: str | None,
    year: int | None,
    market: str,
    execution: str,
    start: datetime | None,
    end: datetime | None,
    preset: str | None,
    log_level: str | None,
) -> AnalyticsView:
    """Load settings and trades, then compute the requested view."""
    try:
        settings = load_settings(config_path)
        obs = settings.observability
        setup_logging(level=log_level or obs.log_level, format=obs.log_format)

        date_from, date_to = _as_date(start), _as_date(end)
        if preset is not None:
            date_from, date_to = preset_range(RangePreset(preset))
        yearly = year is not None and date_from is None and date_to is None

        request = AnalyticsRequest(
            filter=TradeFilter(
                execution=ExecutionFilter(execution),
                market=market,
                date_from=date_from,
                date_to=date_to,
            ),
            view_mode=ViewMode.YEARLY if yearly else ViewMode.DATE_RANGE,
            year=year,
            stat_sets=frozenset(stat_sets),
        )

        store = JsonTradeStore(trades_path)
        if balance is None:
            balance = store.account_balance
        engine = AnalyticsEngine(settings)
        return engine.compute_from_store(store, account_id, balance, request)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    click.echo(f"Wrote {output}", err=True)


@click.group()
def main() -> None:
    """Trade Analytics — journal dashboard statistics."""


@main.command()
@_common_options
@click.option("--section", type=click.Choice([s.value for s in StatSet]), default=None,
              help="Only this statistic set")
@click.option("--include-trades", is_flag=True, help="Embed the filtered trades")
def report(output: Path | None, section: str | None, include_trades: bool, **kwargs) -> None:
    """Full analytics report as JSON."""
    stat_sets = {StatSet(section)} if section else set(StatSet)
    view = _run(stat_sets, **kwargs)
    exporter = AnalyticsExporter()
    if section:
        _emit(exporter.section_to_json(view, section), output)
    else:
        _emit(exporter.to_json(view, include_trades=include_trades), output)


@main.command()
@_common_options
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json")
def monthly(output: Path | None, fmt: str, **kwargs) -> None:
    """Per-month statistics for one year."""
    view = _run({StatSet.MONTHLY}, **kwargs)
    exporter = AnalyticsExporter()
    if fmt == "csv":
        _emit(exporter.monthly_to_csv(view.monthly), output)
    else:
        _emit(exporter.section_to_json(view, StatSet.MONTHLY.value), output)


@main.command()
@_common_options
@click.option("--dimension", default=None,
              help="Single category dimension (setup, market, day, ...)")
@click.option("--format", "fmt", type=click.Choice(["json", "csv"]), default="json")
def categories(output: Path | None, dimension: str | None, fmt: str, **kwargs) -> None:
    """Win/loss breakdown per category."""
    view = _run({StatSet.CATEGORIES}, **kwargs)
    exporter = AnalyticsExporter()
    try:
        if fmt == "csv":
            if dimension is None:
                raise click.UsageError("--format csv requires --dimension")
            _emit(exporter.categories_to_csv(view.categories, dimension), output)
        elif dimension is not None:
            _emit(exporter.dimension_to_json(view.categories, dimension), output)
        else:
            _emit(exporter.section_to_json(view, StatSet.CATEGORIES.value), output)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()
