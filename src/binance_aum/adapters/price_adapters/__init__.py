from __future__ import annotations

from .base import BasePriceAdapter, PairBook, PairOracle
from .binance_ticker import BinanceTickerAdapter

PRICE_ADAPTERS = [
    BinanceTickerAdapter,
]

__all__ = [
    "PRICE_ADAPTERS",
    "BasePriceAdapter",
    "BinanceTickerAdapter",
    "PairBook",
    "PairOracle",
]
