"""Domain models for the AUM valuation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from ..units import quantize_rate, valuation_context


class WalletType(str, Enum):
    """Balance ledgers of a Binance account."""

    SPOT = "spot"
    MARGIN = "margin"
    FUTURES = "futures"
    PORTFOLIO_MARGIN = "portfolio_margin"


RawAmount = str | int | Decimal


@dataclass
class RawBalanceRecord:
    """Unvalidated balance line as reported by one wallet."""

    asset: str
    free: RawAmount = "0"
    locked: RawAmount = "0"
    borrowed: RawAmount = "0"


@dataclass(frozen=True)
class AssetBalance:
    """One asset held in one wallet.

    ``borrowed`` is a liability and only ever reduces the net quantity.
    """

    asset: str
    wallet: WalletType
    free: Decimal
    locked: Decimal
    borrowed: Decimal = Decimal(0)

    @property
    def net_quantity(self) -> Decimal:
        with valuation_context():
            return self.free + self.locked - self.borrowed


@dataclass(frozen=True)
class AccountSnapshot:
    """Balances captured during one fetch cycle."""

    balances: tuple[AssetBalance, ...]
    captured_at: datetime

    @property
    def assets(self) -> tuple[str, ...]:
        """Distinct asset symbols in first-appearance order."""
        return tuple(dict.fromkeys(balance.asset for balance in self.balances))

    def for_wallet(self, wallet: WalletType) -> tuple[AssetBalance, ...]:
        return tuple(b for b in self.balances if b.wallet == wallet)


@dataclass(frozen=True)
class PriceQuote:
    """Price of one ``base`` unit expressed in ``quote``.

    Quotes are directional. Use :meth:`inverted` for the reverse direction.
    """

    base: str
    quote: str
    rate: Decimal
    source: str = "direct"

    def __post_init__(self) -> None:
        if not self.rate > 0:
            raise ValueError(
                f"Quote {self.base}/{self.quote} must have a positive rate, got {self.rate}"
            )

    def inverted(self, source: str = "inverse") -> PriceQuote:
        with valuation_context():
            rate = quantize_rate(Decimal(1) / self.rate)
        return PriceQuote(base=self.quote, quote=self.base, rate=rate, source=source)


@dataclass(frozen=True)
class PriceTable:
    """Quotes for a set of assets against a single reference currency."""

    reference: str
    quotes: Mapping[str, PriceQuote] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for asset, quote in self.quotes.items():
            if quote.base != asset or quote.quote != self.reference:
                raise ValueError(
                    f"Quote {quote.base}/{quote.quote} does not price {asset} in {self.reference}"
                )
        object.__setattr__(self, "quotes", MappingProxyType(dict(self.quotes)))

    def __contains__(self, asset: object) -> bool:
        return asset in self.quotes

    def get(self, asset: str) -> PriceQuote | None:
        return self.quotes.get(asset)

    def rate(self, asset: str) -> Decimal:
        return self.quotes[asset].rate


@dataclass(frozen=True)
class AssetContribution:
    """Value of one snapshot line item in the reference currency."""

    asset: str
    wallet: WalletType
    net_quantity: Decimal
    rate: Decimal
    value: Decimal


@dataclass(frozen=True)
class AumResult:
    """Total valuation with its per-asset breakdown."""

    total: Decimal
    breakdown: Mapping[str, Decimal]
    reference_currency: str
    contributions: tuple[AssetContribution, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "breakdown", MappingProxyType(dict(self.breakdown)))


__all__ = [
    "AccountSnapshot",
    "AssetBalance",
    "AssetContribution",
    "AumResult",
    "PriceQuote",
    "PriceTable",
    "RawBalanceRecord",
    "WalletType",
]
