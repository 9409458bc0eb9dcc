from __future__ import annotations

from decimal import Decimal

from ..domain import AccountSnapshot, AssetContribution, AumResult, PriceTable
from ..errors import MissingPrice
from ..units import valuation_context


def calculate(snapshot: AccountSnapshot, prices: PriceTable) -> AumResult:
    """Value a snapshot in the price table's reference currency.

    Each line contributes ``(free + locked - borrowed) * rate``; a negative
    net quantity (margin short) reduces its asset's total. The total is the
    sum of all per-asset contributions.

    Raises:
        MissingPrice: If an asset in the snapshot has no quote. Checked for
            every asset before any arithmetic.
    """
    missing = [asset for asset in snapshot.assets if asset not in prices]
    if missing:
        raise MissingPrice(missing[0])

    breakdown: dict[str, Decimal] = {}
    contributions: list[AssetContribution] = []
    with valuation_context():
        for balance in snapshot.balances:
            rate = prices.rate(balance.asset)
            net = balance.net_quantity
            value = net * rate
            contributions.append(
                AssetContribution(
                    asset=balance.asset,
                    wallet=balance.wallet,
                    net_quantity=net,
                    rate=rate,
                    value=value,
                )
            )
            breakdown[balance.asset] = breakdown.get(balance.asset, Decimal(0)) + value

        total = sum(breakdown.values(), Decimal(0))

    return AumResult(
        total=total,
        breakdown=breakdown,
        reference_currency=prices.reference,
        contributions=tuple(contributions),
    )
