from __future__ import annotations

from typing import Any

from ...domain import WalletType
from .base import BaseBalanceAdapter, RawBalanceRecord, parse_signed, split_signed


class FuturesBalanceAdapter(BaseBalanceAdapter):
    """USDⓈ-M futures wallet.

    Margin balance (wallet balance plus unrealized PnL) can go negative;
    the negative part is reported as ``borrowed``.
    """

    wallet = WalletType.FUTURES

    @property
    def adapter_name(self) -> str:
        return "futures"

    def fetch_payload(self) -> Any:
        return self.client.futures_balances()

    def parse(self, payload: Any) -> list[RawBalanceRecord]:
        records: list[RawBalanceRecord] = []
        for entry in payload:
            asset = entry["asset"]
            wallet_balance = parse_signed(
                entry.get("balance", "0"), asset=asset, wallet=self.wallet, field="balance"
            )
            pnl = parse_signed(
                entry.get("crossUnPnl", "0"),
                asset=asset,
                wallet=self.wallet,
                field="crossUnPnl",
            )
            free, debt = split_signed(wallet_balance + pnl)
            records.append(RawBalanceRecord(asset=asset, free=free, borrowed=debt))
        return records
