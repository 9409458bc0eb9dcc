"""CLI entrypoint for binance-aum."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import requests
import typer

from .domain import WalletType
from .errors import AumError, BinanceAPIError
from .logger import setup_logging
from .settings import AumSettings, OutputFormat
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Binance account AUM valuation across spot, margin, futures and portfolio-margin wallets.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("binance_aum")


@app.callback(invoke_without_command=True)
def report(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [binance_aum] table).",
        ),
    ] = None,
    reference_currency: Annotated[
        str | None,
        typer.Option(
            "--reference-currency",
            "-r",
            help="Currency the AUM is expressed in (e.g. USDT, BTC).",
        ),
    ] = None,
    bridge_assets: Annotated[
        list[str] | None,
        typer.Option(
            "--bridge-asset",
            "-b",
            help="Intermediate asset for two-hop prices. Repeat to try several in order.",
        ),
    ] = None,
    wallets: Annotated[
        list[WalletType] | None,
        typer.Option(
            "--wallet",
            "-w",
            help="Wallet to include. Repeat for several.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option(
            "--output-format",
            "-o",
            help="Report format: table or json.",
        ),
    ] = None,
    loop: Annotated[
        bool | None,
        typer.Option(
            "--loop/--once",
            help="Repeat the valuation every --interval seconds.",
        ),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option(
            "--interval",
            help="Seconds between valuations in --loop mode.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Value the account and print the AUM report.

    Loads configuration, validates credentials, then runs a single valuation
    or, with --loop, one valuation per interval.
    """
    if config_path:
        os.environ["BINANCE_AUM_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if reference_currency is not None:
        init_kwargs["reference_currency"] = reference_currency
    if bridge_assets:
        init_kwargs["bridge_assets"] = bridge_assets
    if wallets:
        init_kwargs["wallets"] = wallets
    if output_format is not None:
        init_kwargs["output_format"] = output_format
    if loop is not None:
        init_kwargs["loop"] = loop
    if interval is not None:
        init_kwargs["interval_seconds"] = interval
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = AumSettings(**init_kwargs)

    setup_logging(settings.log_level)
    logger = _build_logger()

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if not settings.has_credentials:
        raise typer.BadParameter(
            "api_key and api_secret are required.",
            param_hint=["BINANCE_AUM_API_KEY", "BINANCE_AUM_API_SECRET"],
        )

    state = AppState(settings=settings, logger=logger)

    from .pipeline.run import run_forever, run_report

    if settings.loop:
        asyncio.run(run_forever(state))
        return

    try:
        asyncio.run(run_report(state))
    except (
        AumError,
        BinanceAPIError,
        asyncio.TimeoutError,
        requests.exceptions.RequestException,
    ) as e:
        logger.error("Valuation failed, no report emitted: %s", e)
        raise typer.Exit(code=1) from e


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
