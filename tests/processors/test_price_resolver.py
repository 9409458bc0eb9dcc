from decimal import Decimal

import pytest

from binance_aum.adapters.price_adapters.base import PairBook
from binance_aum.errors import UnresolvablePrice
from binance_aum.processors.price_resolver import PriceResolver, resolve


class RecordingOracle:
    """Pair oracle that records every lookup."""

    def __init__(self, pairs: dict[tuple[str, str], str]):
        self.pairs = {k: Decimal(v) for k, v in pairs.items()}
        self.lookups: list[tuple[str, str]] = []

    def rate(self, base: str, quote: str) -> Decimal | None:
        self.lookups.append((base, quote))
        return self.pairs.get((base, quote))


def test_reference_asset_is_exactly_one_without_lookup():
    oracle = RecordingOracle({("USDT", "USDT"): "0.99"})

    table = resolve({"USDT"}, "USDT", oracle)

    assert table.rate("USDT") == Decimal(1)
    assert table.rate("USDT").as_tuple() == Decimal(1).as_tuple()
    assert table.get("USDT").source == "identity"
    assert oracle.lookups == []


def test_direct_pair_used_as_quoted():
    book = PairBook.from_pairs({("BTC", "USDT"): Decimal("60123.45678901")})

    table = resolve({"BTC"}, "USDT", book)

    assert table.rate("BTC") == Decimal("60123.45678901")
    assert table.get("BTC").source == "direct"


def test_direct_preferred_over_inverse():
    oracle = RecordingOracle({("ETH", "BTC"): "0.05", ("BTC", "ETH"): "19.5"})

    table = resolve({"ETH"}, "BTC", oracle)

    assert table.rate("ETH") == Decimal("0.05")
    assert oracle.lookups == [("ETH", "BTC")]


def test_inverse_pair_is_inverted():
    book = PairBook.from_pairs({("USDT", "TRY"): Decimal("32")})

    table = resolve({"TRY"}, "USDT", book)

    assert table.rate("TRY") == Decimal("0.03125")
    assert table.get("TRY").source == "inverse"
    assert table.get("TRY").base == "TRY"
    assert table.get("TRY").quote == "USDT"


def test_inverse_keeps_eighteen_fractional_digits():
    book = PairBook.from_pairs({("BTC", "ETH"): Decimal("3")})

    table = resolve({"ETH"}, "BTC", book)

    assert table.rate("ETH") == Decimal("0.333333333333333333")


def test_direct_and_inverse_round_trip_within_tolerance():
    book = PairBook.from_pairs(
        {
            ("ETH", "BTC"): Decimal("0.0512345"),
            ("BTC", "ETH"): Decimal("19.5180"),
        }
    )

    eth_in_btc = resolve({"ETH"}, "BTC", book).get("ETH")
    btc_in_eth = resolve({"BTC"}, "ETH", book).get("BTC")

    inverted = eth_in_btc.inverted().rate
    assert abs(inverted - btc_in_eth.rate) / btc_in_eth.rate < Decimal("1e-4")


def test_bridge_through_btc():
    book = PairBook.from_pairs(
        {
            ("XRP", "BTC"): Decimal("0.00001"),
            ("BTC", "EUR"): Decimal("55000"),
        }
    )

    table = resolve({"XRP"}, "EUR", book, bridge_assets=["BTC"])

    assert table.rate("XRP") == Decimal("0.55")
    assert table.get("XRP").source == "bridge:BTC"


def test_bridge_legs_may_be_inverted():
    book = PairBook.from_pairs(
        {
            ("BTC", "XYZ"): Decimal("4"),
            ("EUR", "BTC"): Decimal("0.00002"),
        }
    )

    table = resolve({"XYZ"}, "EUR", book, bridge_assets=["BTC"])

    # XYZ->BTC = 1/4, BTC->EUR = 1/0.00002 = 50000
    assert table.rate("XYZ") == Decimal("12500")


def test_bridges_tried_in_order():
    book = PairBook.from_pairs(
        {
            ("ABC", "ETH"): Decimal("2"),
            ("ETH", "USD"): Decimal("3000"),
        }
    )

    table = resolve({"ABC"}, "USD", book, bridge_assets=["BTC", "ETH"])

    assert table.get("ABC").source == "bridge:ETH"
    assert table.rate("ABC") == Decimal("6000")


def test_bridge_skips_asset_and_reference():
    oracle = RecordingOracle({("BTC", "USD"): "60000"})

    table = resolve({"BTC"}, "USD", oracle, bridge_assets=["BTC", "USD"])

    assert table.rate("BTC") == Decimal("60000")


def test_unresolvable_asset_raises():
    book = PairBook.from_pairs({("BTC", "USDT"): Decimal("60000")})

    with pytest.raises(UnresolvablePrice, match="XYZ") as exc_info:
        resolve({"BTC", "XYZ"}, "USDT", book, bridge_assets=["BTC"])

    assert exc_info.value.asset == "XYZ"
    assert exc_info.value.retry_recommended is True


def test_non_positive_oracle_rate_counts_as_unavailable():
    oracle = RecordingOracle({("LUNA", "USDT"): "0", ("USDT", "LUNA"): "-1"})

    with pytest.raises(UnresolvablePrice):
        resolve({"LUNA"}, "USDT", oracle, bridge_assets=[])


def test_pegged_asset_priced_as_target():
    book = PairBook.from_pairs({("BTC", "USDT"): Decimal("60000")})

    table = resolve({"WBTC"}, "USDT", book, pegged_assets={"WBTC": "BTC"})

    assert table.rate("WBTC") == Decimal("60000")
    assert table.get("WBTC").source == "peg:BTC"


def test_pegged_to_reference_is_one():
    table = resolve({"WBTC"}, "BTC", PairBook(), pegged_assets={"WBTC": "BTC"})

    assert table.rate("WBTC") == Decimal(1)


def test_pegged_asset_without_target_price_raises_for_pegged_asset():
    with pytest.raises(UnresolvablePrice) as exc_info:
        resolve({"WBTC"}, "USDT", PairBook(), pegged_assets={"WBTC": "BTC"})

    assert exc_info.value.asset == "WBTC"


def test_pegged_reference_is_exactly_one():
    book = PairBook.from_pairs({("BTC", "WBTC"): Decimal("1.0003")})

    table = resolve({"WBTC", "BTC"}, "WBTC", book, pegged_assets={"WBTC": "BTC"})

    assert table.rate("WBTC") == Decimal(1)
    assert table.get("WBTC").source == "identity"
    assert table.rate("BTC") == Decimal("1.0003")


def test_inverse_rounding_to_zero_is_unresolvable():
    book = PairBook.from_pairs({("BTC", "XYZ"): Decimal("1e19")})

    with pytest.raises(UnresolvablePrice) as exc_info:
        resolve({"XYZ"}, "BTC", book, bridge_assets=[])

    assert exc_info.value.asset == "XYZ"


def test_inverse_rounding_to_zero_falls_through_to_bridge():
    book = PairBook.from_pairs(
        {
            ("USDT", "SHIB"): Decimal("1e19"),
            ("SHIB", "BTC"): Decimal("0.0000000001"),
            ("BTC", "USDT"): Decimal("60000"),
        }
    )

    table = resolve({"SHIB"}, "USDT", book, bridge_assets=["BTC"])

    assert table.get("SHIB").source == "bridge:BTC"
    assert table.rate("SHIB") == Decimal("0.000006")


def test_resolver_caches_within_one_resolver():
    oracle = RecordingOracle({("BTC", "USDT"): "60000"})
    resolver = PriceResolver("USDT", oracle)

    first = resolver.quote("BTC")
    second = resolver.quote("BTC")

    assert first is second
    assert oracle.lookups == [("BTC", "USDT")]


def test_strategy_chain_order():
    resolver = PriceResolver("USDT", PairBook())

    assert [s.__name__ for s in resolver.strategies] == [
        "_identity",
        "_direct",
        "_inverse",
        "_bridge",
    ]


def test_reference_is_upper_cased():
    book = PairBook.from_pairs({("BTC", "USDT"): Decimal("60000")})

    table = resolve(["BTC"], "usdt", book)

    assert table.reference == "USDT"
