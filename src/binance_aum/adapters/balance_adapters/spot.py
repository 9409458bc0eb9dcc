from __future__ import annotations

from typing import Any

from ...domain import WalletType
from .base import BaseBalanceAdapter, RawBalanceRecord


class SpotBalanceAdapter(BaseBalanceAdapter):
    """Spot wallet: free and locked, never borrowed."""

    wallet = WalletType.SPOT

    @property
    def adapter_name(self) -> str:
        return "spot"

    def fetch_payload(self) -> Any:
        return self.client.spot_account()

    def parse(self, payload: Any) -> list[RawBalanceRecord]:
        return [
            RawBalanceRecord(
                asset=entry["asset"],
                free=entry.get("free", "0"),
                locked=entry.get("locked", "0"),
            )
            for entry in payload.get("balances", [])
        ]
