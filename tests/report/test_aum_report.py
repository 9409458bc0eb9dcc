import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from rich.console import Console

from binance_aum.adapters.balance_adapters import PortfolioMarginDiagnostics, UmPosition
from binance_aum.domain import AccountSnapshot, AssetBalance, PriceQuote, PriceTable, WalletType
from binance_aum.errors import NegativeAum
from binance_aum.processors import calculate
from binance_aum.report import generate_report
from binance_aum.report.formatter import format_report_table
from binance_aum.report.publisher import publish_report, publish_to_stdout
from binance_aum.settings import AumSettings, OutputFormat

CAPTURED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _valuation(margin_borrowed: str = "0"):
    snapshot = AccountSnapshot(
        balances=(
            AssetBalance("BTC", WalletType.SPOT, Decimal("1"), Decimal("0")),
            AssetBalance(
                "BTC", WalletType.MARGIN, Decimal("0"), Decimal("0"), Decimal(margin_borrowed)
            ),
            AssetBalance("USDT", WalletType.SPOT, Decimal("10000.123456789"), Decimal("0")),
        ),
        captured_at=CAPTURED_AT,
    )
    prices = PriceTable(
        reference="USDT",
        quotes={
            "BTC": PriceQuote("BTC", "USDT", Decimal("60000")),
            "USDT": PriceQuote("USDT", "USDT", Decimal(1), source="identity"),
        },
    )
    return snapshot, prices, calculate(snapshot, prices)


def test_generate_report_carries_valuation():
    snapshot, prices, result = _valuation()

    report = generate_report(snapshot, prices, result, report_decimals=8)

    assert report.timestamp == CAPTURED_AT
    assert report.total == Decimal("70000.123456789")
    assert report.total_units == 7_000_012_345_678
    assert report.breakdown == {"BTC": Decimal("60000"), "USDT": Decimal("10000.123456789")}
    assert report.price_sources == {"BTC": "direct", "USDT": "identity"}
    assert len(report.contributions) == 3


def test_negative_total_is_rejected_by_default():
    snapshot, prices, result = _valuation(margin_borrowed="2")

    with pytest.raises(NegativeAum) as exc_info:
        generate_report(snapshot, prices, result, report_decimals=8)

    assert exc_info.value.total < 0


def test_negative_total_allowed_when_configured():
    snapshot, prices, result = _valuation(margin_borrowed="2")

    report = generate_report(snapshot, prices, result, report_decimals=2, allow_negative=True)

    assert report.total == Decimal("-49999.876543211")
    assert report.total_units == -4_999_987


def test_to_dict_is_json_friendly():
    snapshot, prices, result = _valuation()
    diagnostics = PortfolioMarginDiagnostics(
        uni_mmr=Decimal("5.1"),
        actual_equity=Decimal("70000"),
        withdrawable=Decimal("1000"),
        positions=(UmPosition("BTCUSDT", Decimal("-0.5"), Decimal("12.5")),),
    )
    report = generate_report(snapshot, prices, result, report_decimals=8, diagnostics=diagnostics)

    data = report.to_dict()

    assert data["timestamp"] == "2026-03-01T12:00:00+00:00"
    assert data["total"] == "70000.123456789"
    assert data["rates"]["BTC"] == "60000"
    assert data["contributions"][1]["wallet"] == "margin"
    assert data["diagnostics"]["positions"][0]["symbol"] == "BTCUSDT"
    json.dumps(data)


@pytest.mark.asyncio
async def test_publish_json_to_stdout(capsys):
    snapshot, prices, result = _valuation()
    report = generate_report(snapshot, prices, result, report_decimals=8)

    await publish_report(AumSettings(output_format="json"), report)

    out = json.loads(capsys.readouterr().out)
    assert out["reference_currency"] == "USDT"
    assert out["total_units"] == 7_000_012_345_678


@pytest.mark.asyncio
async def test_publish_table_to_stdout(capsys):
    snapshot, prices, result = _valuation()
    report = generate_report(snapshot, prices, result, report_decimals=8)

    await publish_to_stdout(report, OutputFormat.TABLE)

    out = capsys.readouterr().out
    assert "Binance AUM" in out
    assert "TOTAL" in out


def test_table_shows_diagnostics_panel():
    snapshot, prices, result = _valuation()
    diagnostics = PortfolioMarginDiagnostics(
        uni_mmr=Decimal("5.1"), actual_equity=Decimal("1"), withdrawable=Decimal("1")
    )
    report = generate_report(snapshot, prices, result, report_decimals=8, diagnostics=diagnostics)
    console = Console(record=True, width=160)

    format_report_table(report, console=console)

    text = console.export_text()
    assert "Portfolio Margin" in text
    assert "uniMMR" in text
    assert "70,000.12345679" in text
