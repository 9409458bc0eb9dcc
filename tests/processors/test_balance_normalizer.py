from datetime import datetime, timezone
from decimal import Decimal

import pytest

from binance_aum.domain import RawBalanceRecord, WalletType
from binance_aum.errors import MalformedBalance
from binance_aum.processors.balance_normalizer import normalize


def test_empty_input_returns_empty_snapshot():
    snapshot = normalize({})

    assert snapshot.balances == ()
    assert snapshot.captured_at.tzinfo is not None


def test_same_asset_in_two_wallets_stays_separate():
    snapshot = normalize(
        {
            WalletType.SPOT: [RawBalanceRecord("BTC", free="1", locked="0.5")],
            WalletType.MARGIN: [RawBalanceRecord("BTC", free="2", borrowed="0.25")],
        }
    )

    assert [(b.asset, b.wallet) for b in snapshot.balances] == [
        ("BTC", WalletType.SPOT),
        ("BTC", WalletType.MARGIN),
    ]
    assert snapshot.assets == ("BTC",)
    assert snapshot.balances[1].borrowed == Decimal("0.25")


def test_duplicate_records_within_wallet_are_summed():
    snapshot = normalize(
        {
            WalletType.SPOT: [
                RawBalanceRecord("ETH", free="1.1", locked="0.1"),
                RawBalanceRecord("eth ", free=Decimal("0.9"), locked=2),
            ]
        }
    )

    (balance,) = snapshot.balances
    assert balance.asset == "ETH"
    assert balance.free == Decimal("2.0")
    assert balance.locked == Decimal("2.1")
    assert balance.borrowed == Decimal(0)


def test_wallets_follow_declaration_order():
    snapshot = normalize(
        {
            WalletType.PORTFOLIO_MARGIN: [RawBalanceRecord("USDT", free="5")],
            WalletType.FUTURES: [RawBalanceRecord("USDT", free="4")],
            WalletType.SPOT: [
                RawBalanceRecord("SOL", free="3"),
                RawBalanceRecord("BNB", free="1"),
            ],
        }
    )

    assert [(b.wallet, b.asset) for b in snapshot.balances] == [
        (WalletType.SPOT, "SOL"),
        (WalletType.SPOT, "BNB"),
        (WalletType.FUTURES, "USDT"),
        (WalletType.PORTFOLIO_MARGIN, "USDT"),
    ]
    assert snapshot.for_wallet(WalletType.SPOT)[0].asset == "SOL"


def test_wallet_keys_may_be_plain_strings():
    snapshot = normalize({"margin": [RawBalanceRecord("BTC", free="1")]})  # type: ignore[dict-item]

    assert snapshot.balances[0].wallet == WalletType.MARGIN


def test_all_zero_lines_are_dropped():
    snapshot = normalize(
        {
            WalletType.SPOT: [
                RawBalanceRecord("BTC", free="0.00000000", locked="0.00000000"),
                RawBalanceRecord("ETH", free="1"),
            ]
        }
    )

    assert snapshot.assets == ("ETH",)


def test_borrow_only_line_is_kept():
    snapshot = normalize({WalletType.MARGIN: [RawBalanceRecord("BTC", borrowed="2")]})

    assert snapshot.balances[0].net_quantity == Decimal("-2")


@pytest.mark.parametrize(
    "field,value",
    [
        ("free", "abc"),
        ("free", "-1"),
        ("locked", "NaN"),
        ("locked", "Infinity"),
        ("borrowed", "-0.5"),
        ("borrowed", 1.5),
        ("free", True),
        ("free", None),
        ("free", ""),
    ],
)
def test_malformed_field_raises(field, value):
    record = RawBalanceRecord("BTC")
    setattr(record, field, value)

    with pytest.raises(MalformedBalance) as exc_info:
        normalize({WalletType.SPOT: [record]})

    assert exc_info.value.field == field
    assert exc_info.value.asset == "BTC"
    assert exc_info.value.wallet == "spot"


def test_blank_asset_raises():
    with pytest.raises(MalformedBalance, match="asset"):
        normalize({WalletType.SPOT: [RawBalanceRecord("  ", free="1")]})


def test_one_bad_record_fails_whole_snapshot():
    raw = {
        WalletType.SPOT: [RawBalanceRecord("BTC", free="1")],
        WalletType.MARGIN: [RawBalanceRecord("ETH", free="oops")],
    }

    with pytest.raises(MalformedBalance):
        normalize(raw)


def test_naive_timestamp_is_treated_as_utc():
    captured = datetime(2026, 3, 1, 12, 0, 0)

    snapshot = normalize({}, captured_at=captured)

    assert snapshot.captured_at == captured.replace(tzinfo=timezone.utc)


def test_malformed_balance_is_a_value_error():
    with pytest.raises(ValueError):
        normalize({WalletType.SPOT: [RawBalanceRecord("BTC", free="x")]})
