from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from ..adapters.balance_adapters import PortfolioMarginDiagnostics
from ..domain import AccountSnapshot, AssetContribution, AumResult, PriceTable
from ..errors import NegativeAum
from ..units import to_scaled_units


@dataclass
class AumReport:
    """AUM valuation with everything needed to display or serialize it."""

    timestamp: datetime
    reference_currency: str
    total: Decimal
    total_units: int
    report_decimals: int
    breakdown: dict[str, Decimal]
    contributions: list[AssetContribution] = field(default_factory=list)
    rates: dict[str, Decimal] = field(default_factory=dict)
    price_sources: dict[str, str] = field(default_factory=dict)
    diagnostics: PortfolioMarginDiagnostics | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert report to a JSON-friendly dict (decimals as strings)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def generate_report(
    snapshot: AccountSnapshot,
    prices: PriceTable,
    result: AumResult,
    report_decimals: int,
    diagnostics: PortfolioMarginDiagnostics | None = None,
    allow_negative: bool = False,
) -> AumReport:
    """Generate an AUM report from a completed valuation.

    Args:
        snapshot: Snapshot the valuation was computed from (for its timestamp)
        prices: Price table used by the valuation
        result: Calculator output
        report_decimals: Fractional digits of the integer ``total_units``
        diagnostics: Optional portfolio-margin account figures
        allow_negative: Accept a negative total instead of failing

    Returns:
        Report ready for publishing

    Raises:
        NegativeAum: If the total is negative and ``allow_negative`` is False
    """
    if result.total < 0 and not allow_negative:
        raise NegativeAum(result.total, result.reference_currency)

    return AumReport(
        timestamp=snapshot.captured_at,
        reference_currency=result.reference_currency,
        total=result.total,
        total_units=to_scaled_units(result.total, report_decimals),
        report_decimals=report_decimals,
        breakdown=dict(result.breakdown),
        contributions=list(result.contributions),
        rates={asset: quote.rate for asset, quote in prices.quotes.items()},
        price_sources={asset: quote.source for asset, quote in prices.quotes.items()},
        diagnostics=diagnostics,
    )
