from __future__ import annotations

from typing import Any

from ...domain import WalletType
from .base import BaseBalanceAdapter, RawBalanceRecord, parse_signed


class MarginBalanceAdapter(BaseBalanceAdapter):
    """Cross-margin wallet. Accrued interest is owed on top of the principal."""

    wallet = WalletType.MARGIN

    @property
    def adapter_name(self) -> str:
        return "margin"

    def fetch_payload(self) -> Any:
        return self.client.margin_account()

    def parse(self, payload: Any) -> list[RawBalanceRecord]:
        records: list[RawBalanceRecord] = []
        for entry in payload.get("userAssets", []):
            asset = entry["asset"]
            borrowed = parse_signed(
                entry.get("borrowed", "0"), asset=asset, wallet=self.wallet, field="borrowed"
            ) + parse_signed(
                entry.get("interest", "0"), asset=asset, wallet=self.wallet, field="interest"
            )
            records.append(
                RawBalanceRecord(
                    asset=asset,
                    free=entry.get("free", "0"),
                    locked=entry.get("locked", "0"),
                    borrowed=borrowed,
                )
            )
        return records
