"""Balance collection from the enabled wallet adapters."""

from __future__ import annotations

import asyncio
from typing import Any

from ..adapters.balance_adapters import (
    BaseBalanceAdapter,
    PortfolioMarginBalanceAdapter,
    RawBalanceRecord,
    get_adapter_class,
)
from ..domain import WalletType
from ..processors import normalize
from .context import PipelineContext


def _process_adapter_results(
    adapters: list[BaseBalanceAdapter],
    results: list[BaseException | list[RawBalanceRecord]],
    log: Any,
) -> dict[WalletType, list[RawBalanceRecord]]:
    """Join asyncio.gather results from the wallet adapters.

    Args:
        adapters: Adapters in the order their tasks were gathered
        results: Results from asyncio.gather (may contain exceptions)
        log: Logger instance

    Returns:
        Raw records keyed by wallet

    Raises:
        The first adapter failure, after every failure has been logged.
        A snapshot is never built from a subset of wallets.
    """
    failures: list[BaseException] = []
    raw: dict[WalletType, list[RawBalanceRecord]] = {}

    for adapter, result in zip(adapters, results):
        if isinstance(result, BaseException):
            log.error("Adapter '%s' failed: %s", adapter.adapter_name, result)
            failures.append(result)
        else:
            log.debug("Adapter '%s' returned %d records", adapter.adapter_name, len(result))
            raw[adapter.wallet] = result

    if failures:
        raise failures[0]
    return raw


async def collect_balances(ctx: PipelineContext) -> None:
    """Fetch every enabled wallet concurrently and build the snapshot.

    Args:
        ctx: Pipeline context containing state

    Sets the snapshot, and portfolio-margin diagnostics when that wallet is
    enabled, in the context.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    client = ctx.state.binance

    adapters = [get_adapter_class(wallet)(s, client) for wallet in s.wallets]
    log.info(
        "Fetching balances from %d wallet(s): %s",
        len(adapters),
        ", ".join(a.adapter_name for a in adapters),
    )

    results = await asyncio.gather(
        *(adapter.fetch_balances() for adapter in adapters),
        return_exceptions=True,
    )
    raw = _process_adapter_results(adapters, list(results), log)
    ctx.snapshot = normalize(raw)
    log.info(
        "Snapshot holds %d balance line(s) over %d asset(s)",
        len(ctx.snapshot.balances),
        len(ctx.snapshot.assets),
    )

    pm_adapter = next(
        (a for a in adapters if isinstance(a, PortfolioMarginBalanceAdapter)), None
    )
    if pm_adapter is not None:
        try:
            ctx.diagnostics = await pm_adapter.fetch_diagnostics()
        except Exception as e:
            log.warning("Failed to fetch portfolio-margin diagnostics: %s", e)
            ctx.diagnostics = None
