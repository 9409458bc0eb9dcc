from __future__ import annotations

from .aum_calculator import calculate
from .balance_normalizer import normalize
from .price_resolver import PriceResolver, resolve

__all__ = [
    "PriceResolver",
    "calculate",
    "normalize",
    "resolve",
]
