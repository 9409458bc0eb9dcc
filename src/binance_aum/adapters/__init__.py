from __future__ import annotations

from .balance_adapters import BALANCE_ADAPTERS
from .price_adapters import PRICE_ADAPTERS

__all__ = ["BALANCE_ADAPTERS", "PRICE_ADAPTERS"]
