from __future__ import annotations

from .binance import BinanceClient, sign_query

__all__ = ["BinanceClient", "sign_query"]
