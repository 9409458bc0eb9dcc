"""Binance account AUM valuation."""

from __future__ import annotations

from .domain import (
    AccountSnapshot,
    AssetBalance,
    AumResult,
    PriceQuote,
    PriceTable,
    WalletType,
)
from .errors import AumError, MalformedBalance, MissingPrice, UnresolvablePrice
from .processors import calculate, normalize, resolve

__all__ = [
    "AccountSnapshot",
    "AssetBalance",
    "AumError",
    "AumResult",
    "MalformedBalance",
    "MissingPrice",
    "PriceQuote",
    "PriceTable",
    "UnresolvablePrice",
    "WalletType",
    "calculate",
    "normalize",
    "resolve",
]
