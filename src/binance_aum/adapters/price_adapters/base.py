from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Protocol

from ...clients import BinanceClient
from ...settings import AumSettings


class PairOracle(Protocol):
    """Answers "how much ``quote`` for one ``base``", or ``None`` if unlisted."""

    def rate(self, base: str, quote: str) -> Decimal | None: ...


@dataclass(frozen=True)
class PairBook:
    """Point-in-time rates keyed by exchange symbol (``BASE + QUOTE``).

    Non-positive rates are treated as unlisted.
    """

    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    @classmethod
    def from_pairs(cls, pairs: Mapping[tuple[str, str], Decimal]) -> PairBook:
        return cls({f"{base}{quote}": rate for (base, quote), rate in pairs.items()})

    def rate(self, base: str, quote: str) -> Decimal | None:
        value = self.rates.get(f"{base}{quote}")
        if value is None or not value > 0:
            return None
        return value

    def __len__(self) -> int:
        return len(self.rates)


class BasePriceAdapter(ABC):
    """Abstract base class for price adapters."""

    def __init__(self, config: AumSettings, client: BinanceClient):
        """Initialize the adapter with configuration."""
        self.config = config
        self.client = client

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_pair_book(self) -> PairBook:
        """Fetch a complete, fresh set of pair rates."""
        ...
