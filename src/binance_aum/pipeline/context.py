from __future__ import annotations

from dataclasses import dataclass

from ..adapters.balance_adapters import PortfolioMarginDiagnostics
from ..domain import AccountSnapshot, AumResult, PriceTable
from ..report import AumReport
from ..state import AppState


@dataclass
class PipelineContext:
    state: AppState
    snapshot: AccountSnapshot | None = None
    diagnostics: PortfolioMarginDiagnostics | None = None
    prices: PriceTable | None = None
    result: AumResult | None = None
    report: AumReport | None = None

    @property
    def snapshot_required(self) -> AccountSnapshot:
        if self.snapshot is None:
            raise RuntimeError(
                "Snapshot has not been set. Ensure collect_balances() is called before accessing this property."
            )
        return self.snapshot

    @property
    def prices_required(self) -> PriceTable:
        if self.prices is None:
            raise RuntimeError(
                "Prices have not been set. Ensure price_balances() is called before accessing this property."
            )
        return self.prices

    @property
    def result_required(self) -> AumResult:
        if self.result is None:
            raise RuntimeError(
                "AUM result has not been set. Ensure price_balances() is called before accessing this property."
            )
        return self.result

    @property
    def report_required(self) -> AumReport:
        if self.report is None:
            raise RuntimeError(
                "Report has not been set. Ensure build_report() is called before accessing this property."
            )
        return self.report
