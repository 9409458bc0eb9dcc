from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from .base import BasePriceAdapter, PairBook

logger = logging.getLogger(__name__)


class BinanceTickerAdapter(BasePriceAdapter):
    """Builds a :class:`PairBook` from Binance's all-symbols ticker endpoint.

    A single request returns every listed symbol, so the book is complete
    before any price is resolved. Delisted symbols quote ``0`` and are
    dropped along with any unparseable entry.
    """

    @property
    def adapter_name(self) -> str:
        return "binance_ticker"

    async def fetch_pair_book(self) -> PairBook:
        tickers = await asyncio.to_thread(self.client.ticker_prices)
        book = self.parse_tickers(tickers)
        logger.debug("Loaded %d ticker prices", len(book))
        return book

    def parse_tickers(self, tickers: list[dict[str, Any]]) -> PairBook:
        rates: dict[str, Decimal] = {}
        for ticker in tickers:
            symbol = ticker.get("symbol")
            raw_price = ticker.get("price")
            if not symbol or raw_price is None:
                continue
            try:
                price = Decimal(str(raw_price))
            except InvalidOperation:
                logger.warning("Skipping %s: invalid price %r", symbol, raw_price)
                continue
            if not price.is_finite() or price <= 0:
                logger.debug("Skipping %s: non-positive price %s", symbol, price)
                continue
            rates[symbol] = price
        return PairBook(rates)
