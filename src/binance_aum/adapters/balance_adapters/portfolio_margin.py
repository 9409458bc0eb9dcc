from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from ...domain import WalletType
from .base import BaseBalanceAdapter, RawBalanceRecord, parse_signed, split_signed

# Futures legs of a portfolio-margin balance: (wallet balance, unrealized PnL)
_FUTURES_LEGS = (
    ("umWalletBalance", "umUnrealizedPNL"),
    ("cmWalletBalance", "cmUnrealizedPNL"),
)


@dataclass(frozen=True)
class UmPosition:
    symbol: str
    amount: Decimal
    pnl: Decimal


@dataclass(frozen=True)
class PortfolioMarginDiagnostics:
    """Account health figures reported next to the valuation."""

    uni_mmr: Decimal
    actual_equity: Decimal
    withdrawable: Decimal
    positions: tuple[UmPosition, ...] = field(default_factory=tuple)


class PortfolioMarginBalanceAdapter(BaseBalanceAdapter):
    """Portfolio-margin (unified) account.

    Each asset combines a cross-margin ledger with UM and CM futures
    wallets. Cross-margin free/locked map directly; positive futures equity
    adds to ``free``; borrowed principal, interest, negative balance and
    negative futures equity are all debt.
    """

    wallet = WalletType.PORTFOLIO_MARGIN

    @property
    def adapter_name(self) -> str:
        return "portfolio_margin"

    def fetch_payload(self) -> Any:
        return self.client.pm_balances()

    def _amount(self, entry: dict[str, Any], key: str) -> Decimal:
        return parse_signed(
            entry.get(key) or "0", asset=entry["asset"], wallet=self.wallet, field=key
        )

    def parse(self, payload: Any) -> list[RawBalanceRecord]:
        records: list[RawBalanceRecord] = []
        for entry in payload:
            futures_equity = sum(
                (self._amount(entry, bal) + self._amount(entry, pnl) for bal, pnl in _FUTURES_LEGS),
                Decimal(0),
            )
            futures_gain, futures_debt = split_signed(futures_equity)
            debt = (
                self._amount(entry, "crossMarginBorrowed")
                + self._amount(entry, "crossMarginInterest")
                + self._amount(entry, "negativeBalance")
                + futures_debt
            )
            records.append(
                RawBalanceRecord(
                    asset=entry["asset"],
                    free=self._amount(entry, "crossMarginFree") + futures_gain,
                    locked=self._amount(entry, "crossMarginLocked"),
                    borrowed=debt,
                )
            )
        return records

    async def fetch_diagnostics(self) -> PortfolioMarginDiagnostics:
        """Fetch uniMMR, equity, withdrawable amount and tracked UM positions."""
        account, positions = await asyncio.gather(
            asyncio.to_thread(self.client.pm_account_info),
            asyncio.to_thread(self.client.um_positions),
        )
        return self.parse_diagnostics(account, positions)

    def parse_diagnostics(
        self, account: dict[str, Any], positions: list[dict[str, Any]]
    ) -> PortfolioMarginDiagnostics:
        def _field(payload: dict[str, Any], *keys: str) -> Decimal:
            # Binance has shipped both spellings of some keys
            for key in keys:
                if key in payload:
                    return parse_signed(
                        payload[key], asset="-", wallet=self.wallet, field=key
                    )
            return Decimal(0)

        tracked = set(self.config.um_positions)
        return PortfolioMarginDiagnostics(
            uni_mmr=_field(account, "uniMMR", "uniMmr"),
            actual_equity=_field(account, "actualEquity"),
            withdrawable=_field(account, "virtualMaxWithdrawAmount"),
            positions=tuple(
                UmPosition(
                    symbol=p["symbol"],
                    amount=_field(p, "positionAmt"),
                    pnl=_field(p, "unRealizedProfit", "unrealizedProfit"),
                )
                for p in positions
                if p.get("symbol") in tracked
            ),
        )
