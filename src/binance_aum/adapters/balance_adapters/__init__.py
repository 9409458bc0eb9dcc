from __future__ import annotations

from ...domain import WalletType
from .base import BaseBalanceAdapter, RawBalanceRecord
from .futures import FuturesBalanceAdapter
from .margin import MarginBalanceAdapter
from .portfolio_margin import (
    PortfolioMarginBalanceAdapter,
    PortfolioMarginDiagnostics,
    UmPosition,
)
from .spot import SpotBalanceAdapter

BALANCE_ADAPTERS: dict[WalletType, type[BaseBalanceAdapter]] = {
    WalletType.SPOT: SpotBalanceAdapter,
    WalletType.MARGIN: MarginBalanceAdapter,
    WalletType.FUTURES: FuturesBalanceAdapter,
    WalletType.PORTFOLIO_MARGIN: PortfolioMarginBalanceAdapter,
}


def get_adapter_class(wallet: WalletType) -> type[BaseBalanceAdapter]:
    """Return the balance adapter class for a wallet type."""
    try:
        return BALANCE_ADAPTERS[wallet]
    except KeyError:
        raise ValueError(f"No balance adapter registered for wallet {wallet!r}") from None


__all__ = [
    "BALANCE_ADAPTERS",
    "BaseBalanceAdapter",
    "FuturesBalanceAdapter",
    "MarginBalanceAdapter",
    "PortfolioMarginBalanceAdapter",
    "PortfolioMarginDiagnostics",
    "RawBalanceRecord",
    "SpotBalanceAdapter",
    "UmPosition",
    "get_adapter_class",
]
