"""CLI entry point for the trade analytics library."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import click

from .core.enums import Emotion, Grade, Instrument, Setup, Side


def _parse_now(now: str | None):
    """Pinned clock for ``--now``, or the wall clock."""
    from .core.clock import SimClock, WallClock

    if now is None:
        return WallClock()
    try:
        dt = datetime.fromisoformat(now)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--now") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return SimClock(dt)


def _load(
    trades_file: str,
    config: str | None,
    symbols: tuple[str, ...] = (),
    instruments: tuple[str, ...] = (),
    sides: tuple[str, ...] = (),
):
    """Settings plus the filtered trade list."""
    from .analytics.grouping import apply_filters
    from .core.config import load_settings
    from .core.errors import AnalyticsError
    from .core.models import FilterState
    from .data.loader import load_trades

    try:
        settings = load_settings(config)
        trades = load_trades(trades_file)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc

    filters = FilterState(
        symbols=list(symbols),
        instruments=[Instrument(i) for i in instruments],
        sides=[Side(s) for s in sides],
    )
    return settings, apply_filters(trades, filters)


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


def _common_options(func):
    """TRADES_FILE plus the options every analytics command shares."""
    func = click.option(
        "--side", "sides", multiple=True,
        type=click.Choice([s.value for s in Side]), help="Only this side (repeatable)",
    )(func)
    func = click.option(
        "--instrument", "instruments", multiple=True,
        type=click.Choice([i.value for i in Instrument]), help="Only this instrument (repeatable)",
    )(func)
    func = click.option(
        "--symbol", "symbols", multiple=True, help="Only this symbol (repeatable)",
    )(func)
    func = click.option("--config", default=None, help="Config file path")(func)
    func = click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))(func)
    return func


def _now_option(func):
    """``--now`` for commands that depend on the current time."""
    return click.option(
        "--now", default=None, help="Pin the current time (ISO datetime, UTC if naive)",
    )(func)


@click.group()
@click.option("--log-level", default=None, help="Log level override (DEBUG, INFO, ...)")
@click.option(
    "--log-format", default=None, type=click.Choice(["console", "json"]),
    help="Log output format",
)
def main(log_level: str | None, log_format: str | None) -> None:
    """Trade Analytics: performance metrics and behavioural profiling."""
    from .core.config import ObservabilityConfig
    from .observability.logger import new_run_id, setup_logging

    defaults = ObservabilityConfig()
    setup_logging(
        level=log_level or defaults.log_level,
        format=log_format or defaults.log_format,
    )
    new_run_id()


@main.command()
@_common_options
@_now_option
def metrics(
    trades_file: str,
    config: str | None,
    now: str | None,
    symbols: tuple[str, ...],
    instruments: tuple[str, ...],
    sides: tuple[str, ...],
) -> None:
    """Compute the full dashboard metrics."""
    from .analytics.metrics import calculate_metrics

    settings, trades = _load(trades_file, config, symbols, instruments, sides)
    result = calculate_metrics(trades, settings=settings, clock=_parse_now(now))
    _echo_json(result.to_dict())


@main.command()
@_common_options
@_now_option
def thresholds(
    trades_file: str,
    config: str | None,
    now: str | None,
    symbols: tuple[str, ...],
    instruments: tuple[str, ...],
    sides: tuple[str, ...],
) -> None:
    """Compute adaptive threshold zones."""
    from .analytics.metrics import calculate_metrics
    from .analytics.thresholds import calculate_adaptive_thresholds

    settings, trades = _load(trades_file, config, symbols, instruments, sides)
    clock = _parse_now(now)
    m = calculate_metrics(trades, settings=settings, clock=clock)
    result = calculate_adaptive_thresholds(trades, m, settings=settings, clock=clock)
    _echo_json(result.to_dict())


@main.command()
@_common_options
def correlation(
    trades_file: str,
    config: str | None,
    symbols: tuple[str, ...],
    instruments: tuple[str, ...],
    sides: tuple[str, ...],
) -> None:
    """Correlation matrix of daily P&L across the most-traded symbols."""
    from .analytics.correlation import build_correlation_matrix

    settings, trades = _load(trades_file, config, symbols, instruments, sides)
    _echo_json(build_correlation_matrix(trades, settings=settings).to_dict())


@main.command()
@_common_options
@_now_option
def profile(
    trades_file: str,
    config: str | None,
    now: str | None,
    symbols: tuple[str, ...],
    instruments: tuple[str, ...],
    sides: tuple[str, ...],
) -> None:
    """Trader style, behavioural patterns and evolution."""
    from .analytics.metrics import calculate_metrics
    from .analytics.profile import generate_trader_profile

    settings, trades = _load(trades_file, config, symbols, instruments, sides)
    m = calculate_metrics(trades, settings=settings, clock=_parse_now(now))
    _echo_json(generate_trader_profile(trades, m, settings=settings).to_dict())


@main.command()
@_common_options
@_now_option
@click.option("--format", "fmt", default="csv", type=click.Choice(["csv", "json"]), help="Output format")
@click.option("--output", default=None, help="Output file or directory (default: stdout)")
@click.option("--prefix", default="trades", help="File name prefix when --output is a directory")
def export(
    trades_file: str,
    config: str | None,
    now: str | None,
    symbols: tuple[str, ...],
    instruments: tuple[str, ...],
    sides: tuple[str, ...],
    fmt: str,
    output: str | None,
    prefix: str,
) -> None:
    """Export trades as CSV or JSON."""
    from .journal.export import TradeExporter, export_filename
    from .observability.logger import get_logger

    _, trades = _load(trades_file, config, symbols, instruments, sides)
    exporter = TradeExporter()
    text = exporter.to_csv(trades) if fmt == "csv" else exporter.to_json(trades)

    if output is None:
        click.echo(text, nl=False)
        return

    path = Path(output)
    if path.is_dir():
        today: date = _parse_now(now).now().date()
        name = export_filename(prefix, today)
        if fmt == "json":
            name = name[: -len(".csv")] + ".json"
        path = path / name
    path.write_text(text)
    get_logger(__name__).info("trades_exported", path=str(path), count=len(trades))


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("trade_id")
@click.option("--emotion", default=None, type=click.Choice([e.value for e in Emotion]))
@click.option("--setup", default=None, type=click.Choice([s.value for s in Setup]))
@click.option("--grade", default=None, type=click.Choice([g.value for g in Grade]))
@click.option("--pre-note", default=None, help="Pre-trade note")
@click.option("--post-note", default=None, help="Post-trade note")
@click.option("--output", default=None, help="Write the updated trades here (default: stdout)")
def annotate(
    trades_file: str,
    trade_id: str,
    emotion: str | None,
    setup: str | None,
    grade: str | None,
    pre_note: str | None,
    post_note: str | None,
    output: str | None,
) -> None:
    """Patch the journal of one trade and emit the updated trades as JSON."""
    from .core.errors import AnalyticsError
    from .data.loader import load_trades
    from .journal.annotate import update_trade_journal
    from .journal.export import TradeExporter

    patch = {
        key: value
        for key, value in {
            "emotion": emotion,
            "setup": setup,
            "grade": grade,
            "pre_trade_note": pre_note,
            "post_trade_note": post_note,
        }.items()
        if value is not None
    }
    try:
        trades = load_trades(trades_file)
        updated = update_trade_journal(trades, trade_id, patch)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc

    if not any(t.id == trade_id for t in trades):
        click.echo(f"Trade {trade_id} not found; nothing changed", err=True)

    text = TradeExporter().to_json(updated)
    if output is None:
        click.echo(text)
    else:
        Path(output).write_text(text)


if __name__ == "__main__":
    main()
