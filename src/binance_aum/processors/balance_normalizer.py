from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from ..domain import AccountSnapshot, AssetBalance, RawBalanceRecord, WalletType
from ..errors import MalformedBalance
from ..units import valuation_context

_FIELDS = ("free", "locked", "borrowed")


def _parse_amount(value: object, *, asset: str, wallet: WalletType, field: str) -> Decimal:
    """Parse a raw amount as a finite, non-negative decimal.

    Floats are rejected: a binary float has already lost the exchange's
    decimal representation.
    """
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int) and not isinstance(value, bool):
        parsed = Decimal(value)
    elif isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise MalformedBalance(asset, wallet.value, field, value) from None
    else:
        raise MalformedBalance(asset, wallet.value, field, value)

    if not parsed.is_finite() or parsed < 0:
        raise MalformedBalance(asset, wallet.value, field, value)
    return parsed


def normalize(
    raw_wallet_records: Mapping[WalletType, Iterable[RawBalanceRecord]],
    captured_at: datetime | None = None,
) -> AccountSnapshot:
    """Build an account snapshot from per-wallet raw balance records.

    Args:
        raw_wallet_records: Raw records keyed by wallet type
        captured_at: Capture time of the fetch cycle (defaults to now, UTC)

    Returns:
        An immutable snapshot with one line item per (wallet, asset)

    Raises:
        MalformedBalance: If any field is not a finite, non-negative decimal.
            No snapshot is produced in that case.

    Duplicate records of an asset within one wallet are summed. The same
    asset in two wallets stays as two line items, since margin and futures
    carry debt that spot does not. Lines that are zero in every field are
    dropped.
    """
    by_wallet: dict[WalletType, dict[str, list[Decimal]]] = {}
    for wallet_key, records in raw_wallet_records.items():
        wallet = WalletType(wallet_key)
        merged = by_wallet.setdefault(wallet, {})
        for record in records:
            asset = record.asset.strip().upper() if isinstance(record.asset, str) else ""
            if not asset:
                raise MalformedBalance("", wallet.value, "asset", record.asset)

            amounts = [
                _parse_amount(getattr(record, name), asset=asset, wallet=wallet, field=name)
                for name in _FIELDS
            ]
            current = merged.setdefault(asset, [Decimal(0)] * len(_FIELDS))
            with valuation_context():
                merged[asset] = [a + b for a, b in zip(current, amounts)]

    balances: list[AssetBalance] = []
    for wallet in WalletType:
        for asset, (free, locked, borrowed) in by_wallet.get(wallet, {}).items():
            if not (free or locked or borrowed):
                continue
            balances.append(
                AssetBalance(
                    asset=asset,
                    wallet=wallet,
                    free=free,
                    locked=locked,
                    borrowed=borrowed,
                )
            )

    if captured_at is None:
        captured_at = datetime.now(timezone.utc)
    elif captured_at.tzinfo is None:
        captured_at = captured_at.replace(tzinfo=timezone.utc)

    return AccountSnapshot(balances=tuple(balances), captured_at=captured_at)
