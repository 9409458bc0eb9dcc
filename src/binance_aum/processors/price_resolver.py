from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal

from ..adapters.price_adapters.base import PairOracle
from ..domain import PriceQuote, PriceTable
from ..errors import UnresolvablePrice
from ..units import quantize_rate, valuation_context

logger = logging.getLogger(__name__)

Strategy = Callable[[str], PriceQuote | None]


def _positive(rate: object) -> Decimal | None:
    if rate is None:
        return None
    value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    if not value.is_finite() or value <= 0:
        return None
    return value


class PriceResolver:
    """Prices assets in one reference currency from an available-pairs oracle.

    Each asset goes through ``strategies`` in order and the first quote
    wins: identity, direct pair, inverted reverse pair, then two-hop bridge
    through each configured bridge asset. Pegged assets are priced as their
    peg target. Quotes are cached for the lifetime of the resolver only.
    """

    def __init__(
        self,
        reference: str,
        direct_pairs: PairOracle,
        bridge_assets: Iterable[str] = ("BTC",),
        pegged_assets: Mapping[str, str] | None = None,
    ):
        self.reference = reference.strip().upper()
        self.direct_pairs = direct_pairs
        self.bridge_assets = tuple(b.strip().upper() for b in bridge_assets)
        self.pegged_assets = {
            k.strip().upper(): v.strip().upper() for k, v in (pegged_assets or {}).items()
        }
        self.strategies: tuple[Strategy, ...] = (
            self._identity,
            self._direct,
            self._inverse,
            self._bridge,
        )
        self._cache: dict[str, PriceQuote] = {}

    def quote(self, asset: str) -> PriceQuote:
        """Return the quote for ``asset`` in the reference currency.

        Raises:
            UnresolvablePrice: If no strategy produces a quote.
        """
        cached = self._cache.get(asset)
        if cached is not None:
            return cached

        # The reference is exactly 1 even when it is itself pegged
        target = None if asset == self.reference else self.pegged_assets.get(asset)
        if target is not None and target != asset:
            underlying = self._first_success(target)
            quote = (
                None
                if underlying is None
                else PriceQuote(asset, self.reference, underlying.rate, f"peg:{target}")
            )
        else:
            quote = self._first_success(asset)

        if quote is None:
            logger.error("No price path from %s to %s", asset, self.reference)
            raise UnresolvablePrice(asset, self.reference)

        logger.debug(
            "Resolved %s/%s = %s via %s", asset, self.reference, quote.rate, quote.source
        )
        self._cache[asset] = quote
        return quote

    def _first_success(self, asset: str) -> PriceQuote | None:
        for strategy in self.strategies:
            quote = strategy(asset)
            if quote is not None:
                return quote
        return None

    def _identity(self, asset: str) -> PriceQuote | None:
        if asset != self.reference:
            return None
        return PriceQuote(asset, self.reference, Decimal(1), "identity")

    def _direct(self, asset: str) -> PriceQuote | None:
        rate = _positive(self.direct_pairs.rate(asset, self.reference))
        if rate is None:
            return None
        return PriceQuote(asset, self.reference, rate, "direct")

    def _inverse(self, asset: str) -> PriceQuote | None:
        reverse = _positive(self.direct_pairs.rate(self.reference, asset))
        if reverse is None:
            return None
        with valuation_context():
            rate = quantize_rate(Decimal(1) / reverse)
        if rate <= 0:
            logger.warning(
                "Inverse rate for %s from %s%s rounds to zero, skipping",
                asset,
                self.reference,
                asset,
            )
            return None
        return PriceQuote(asset, self.reference, rate, "inverse")

    def _leg(self, base: str, quote: str) -> Decimal | None:
        """One hop, taken directly or by inverting the reverse pair."""
        direct = _positive(self.direct_pairs.rate(base, quote))
        if direct is not None:
            return direct
        reverse = _positive(self.direct_pairs.rate(quote, base))
        if reverse is None:
            return None
        with valuation_context():
            return quantize_rate(Decimal(1) / reverse)

    def _bridge(self, asset: str) -> PriceQuote | None:
        for bridge in self.bridge_assets:
            if bridge in (asset, self.reference):
                continue
            first = self._leg(asset, bridge)
            if first is None:
                continue
            second = self._leg(bridge, self.reference)
            if second is None:
                continue
            with valuation_context():
                rate = quantize_rate(first * second)
            if rate <= 0:
                logger.warning(
                    "Bridged rate for %s via %s rounds to zero, skipping", asset, bridge
                )
                continue
            return PriceQuote(asset, self.reference, rate, f"bridge:{bridge}")
        return None


def resolve(
    assets: Iterable[str],
    reference: str,
    direct_pairs: PairOracle,
    bridge_assets: Iterable[str] = ("BTC",),
    pegged_assets: Mapping[str, str] | None = None,
) -> PriceTable:
    """Build a price table for ``assets`` against ``reference``.

    Args:
        assets: Asset symbols to price, as they appear in the snapshot
        reference: Reference (quote) currency
        direct_pairs: Oracle answering ``rate(base, quote)``
        bridge_assets: Intermediate assets tried in order for two-hop quotes
        pegged_assets: Assets priced as another asset (e.g. WBTC -> BTC)

    Returns:
        A price table holding one quote per asset

    Raises:
        UnresolvablePrice: For the first asset with no price path. No
            partial table is returned.
    """
    resolver = PriceResolver(reference, direct_pairs, bridge_assets, pegged_assets)
    quotes = {asset: resolver.quote(asset) for asset in sorted(set(assets))}
    return PriceTable(reference=resolver.reference, quotes=quotes)
