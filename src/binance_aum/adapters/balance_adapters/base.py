from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar

from ...clients import BinanceClient
from ...domain import RawBalanceRecord, WalletType
from ...errors import MalformedBalance
from ...settings import AumSettings


def parse_signed(value: Any, *, asset: str, wallet: WalletType, field: str) -> Decimal:
    """Parse a possibly negative exchange amount (PnL, wallet balance)."""
    try:
        parsed = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise MalformedBalance(asset, wallet.value, field, value) from None
    if not parsed.is_finite():
        raise MalformedBalance(asset, wallet.value, field, value)
    return parsed


def split_signed(value: Decimal) -> tuple[Decimal, Decimal]:
    """Split ``value`` into (positive part, magnitude of negative part)."""
    if value >= 0:
        return value, Decimal(0)
    return Decimal(0), -value


class BaseBalanceAdapter(ABC):
    """Abstract base class for wallet balance adapters."""

    wallet: ClassVar[WalletType]

    def __init__(self, config: AumSettings, client: BinanceClient):
        """Initialize the adapter.

        Args:
            config: Valuation settings
            client: Binance REST client shared by all adapters of a run
        """
        self.config = config
        self.client = client

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    def fetch_payload(self) -> Any:
        """Blocking call returning the raw exchange payload."""
        ...

    @abstractmethod
    def parse(self, payload: Any) -> list[RawBalanceRecord]:
        """Turn the exchange payload into raw balance records."""
        ...

    async def fetch_balances(self) -> list[RawBalanceRecord]:
        """Fetch and parse this wallet's balances, honouring ``tracked_assets``."""
        payload = await asyncio.to_thread(self.fetch_payload)
        records = self.parse(payload)
        tracked = set(self.config.tracked_assets)
        if tracked:
            records = [r for r in records if r.asset.strip().upper() in tracked]
        return records
