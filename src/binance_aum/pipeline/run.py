"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..report import AumReport
from ..state import AppState
from .balances import collect_balances
from .context import PipelineContext
from .pricing import price_balances
from .report import build_report, publish_report


async def run_report(state: AppState) -> AumReport:
    """Execute one complete valuation.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Balance collection (all wallets joined)
    2. Price resolution and AUM calculation
    3. Report generation
    4. Publishing

    Every call builds a fresh snapshot and price table.

    Args:
        state: Application state containing settings, logger and client

    Returns:
        The published report
    """
    s = state.settings
    log = state.logger

    log.info(
        "Starting valuation",
        extra={"reference": s.reference_currency, "wallets": [w.value for w in s.wallets]},
    )

    timeout_s = s.global_timeout_seconds

    ctx = PipelineContext(state=state)

    async def _run_pipeline() -> None:
        await collect_balances(ctx)
        await price_balances(ctx)
        await build_report(ctx)
        await publish_report(ctx)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error("Valuation timed out", extra={"timeout_seconds": timeout_s})
        raise asyncio.TimeoutError(
            f"Valuation exceeded global timeout {timeout_s}s\n N.B. This can be changed via "
            "`global_timeout_seconds` or BINANCE_AUM_GLOBAL_TIMEOUT_SECONDS."
        ) from exc

    log.info("Valuation completed")
    return ctx.report_required


async def run_forever(state: AppState, max_cycles: int | None = None) -> None:
    """Run valuations every ``interval_seconds``.

    A failed cycle is logged and the next one starts from scratch; no
    snapshot or price is carried between cycles.

    Args:
        state: Application state
        max_cycles: Stop after this many cycles (runs forever when None)
    """
    s = state.settings
    log = state.logger
    cycle = 0

    while max_cycles is None or cycle < max_cycles:
        cycle += 1
        try:
            await run_report(state)
        except Exception as e:
            log.error("Valuation cycle %d failed: %s", cycle, e)

        if max_cycles is not None and cycle >= max_cycles:
            break
        await asyncio.sleep(s.interval_seconds)
