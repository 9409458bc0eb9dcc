"""Price resolution and valuation."""

from __future__ import annotations

from typing import Any

import backoff

from ..adapters import PRICE_ADAPTERS
from ..adapters.price_adapters import PairBook
from ..domain import PriceTable
from ..errors import UnresolvablePrice
from ..processors import calculate, resolve
from .context import PipelineContext


async def fetch_pair_book(ctx: PipelineContext) -> PairBook:
    """Build a fresh pair book from every price adapter (later ones win)."""
    s = ctx.state.settings
    client = ctx.state.binance
    rates: dict[str, Any] = {}
    for adapter_cls in PRICE_ADAPTERS:
        book = await adapter_cls(s, client).fetch_pair_book()
        rates.update(book.rates)
    return PairBook(rates)


async def price_balances(ctx: PipelineContext) -> None:
    """Resolve a price for every asset in the snapshot and value it.

    Args:
        ctx: Pipeline context containing state and snapshot

    Sets the price table and AUM result in the context.

    Raises:
        UnresolvablePrice: If an asset still has no price path after
            ``price_retries`` fresh pair books
        MissingPrice: If the price table does not cover the snapshot
    """
    s = ctx.state.settings
    log = ctx.state.logger
    snapshot = ctx.snapshot_required

    log.info(
        "Resolving prices for %d asset(s) in %s (bridges: %s)...",
        len(snapshot.assets),
        s.reference_currency,
        ", ".join(s.bridge_assets) or "none",
    )

    def _should_giveup(exc: Exception) -> bool:
        return isinstance(exc, UnresolvablePrice) and not exc.retry_recommended

    def _on_backoff(details: Any) -> None:
        log.warning(
            "Price resolution failed (attempt %d of %d): %s",
            details["tries"],
            s.price_retries + 1,
            details.get("exception"),
        )

    def _on_giveup(details: Any) -> None:
        log.error(
            "Price resolution failed after %d attempt(s): %s",
            details["tries"],
            details.get("exception"),
        )

    @backoff.on_exception(
        backoff.constant,
        UnresolvablePrice,
        max_tries=s.price_retries + 1,
        interval=s.price_retry_interval,
        jitter=None,
        giveup=_should_giveup,
        on_backoff=_on_backoff,
        on_giveup=_on_giveup,
    )
    async def _resolve_with_retry() -> PriceTable:
        book = await fetch_pair_book(ctx)
        log.debug("Pair book holds %d symbols", len(book))
        return resolve(
            snapshot.assets,
            s.reference_currency,
            book,
            bridge_assets=s.bridge_assets,
            pegged_assets=s.pegged_assets,
        )

    prices = await _resolve_with_retry()
    ctx.prices = prices

    log.info("Calculating AUM...")
    ctx.result = calculate(snapshot, prices)
    log.info("AUM: %s %s", ctx.result.total, ctx.result.reference_currency)
