"""Rich console formatter for AUM reports."""

from __future__ import annotations

from decimal import Decimal

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from .generator import AumReport


def _fmt(value: Decimal, places: int = 8) -> str:
    """Format a decimal with thousands separators and fixed places."""
    return f"{value:,.{places}f}"


def _summary_panel(report: AumReport) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="green")
    table.add_row("Timestamp", report.timestamp.isoformat())
    table.add_row("Reference", report.reference_currency)
    table.add_row("AUM", f"{_fmt(report.total)} {report.reference_currency}")
    table.add_row(f"AUM (1e-{report.report_decimals} units)", f"{report.total_units:,}")
    table.add_row("Assets", str(len(report.breakdown)))
    return Panel(table, title="[bold]Summary[/]", border_style="green")


def _diagnostics_panel(report: AumReport) -> Panel | None:
    diagnostics = report.diagnostics
    if diagnostics is None:
        return None

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="cyan")
    table.add_row("uniMMR", _fmt(diagnostics.uni_mmr))
    table.add_row("Actual equity (USD)", _fmt(diagnostics.actual_equity))
    table.add_row("Withdrawable (USD)", _fmt(diagnostics.withdrawable))
    for position in diagnostics.positions:
        table.add_row(
            position.symbol,
            f"amount={position.amount.normalize()} pnl={_fmt(position.pnl)}",
        )
    return Panel(table, title="[bold]Portfolio Margin[/]", border_style="blue")


def _contributions_table(report: AumReport) -> Table:
    table = Table(expand=True, show_lines=False)
    table.add_column("Asset", style="cyan", no_wrap=True)
    table.add_column("Wallet", style="dim")
    table.add_column("Net Quantity", justify="right")
    table.add_column("Rate", justify="right", style="yellow")
    table.add_column("Source", style="dim")
    table.add_column(f"Value ({report.reference_currency})", justify="right", style="green")

    for item in report.contributions:
        table.add_row(
            item.asset,
            item.wallet.value,
            f"{item.net_quantity.normalize():f}",
            f"{item.rate.normalize():f}",
            report.price_sources.get(item.asset, ""),
            _fmt(item.value),
        )

    table.add_row(
        "[bold]TOTAL[/]",
        "",
        "",
        "",
        "",
        f"[bold]{_fmt(report.total)}[/]",
        style="bold",
    )
    return table


def format_report_table(report: AumReport, console: Console | None = None) -> None:
    """Print the report as a rich dashboard to stdout.

    Args:
        report: The report to format
        console: Console to print on (a fresh stdout console by default)
    """
    console = console or Console()

    top = [_summary_panel(report)]
    diagnostics = _diagnostics_panel(report)
    if diagnostics is not None:
        top.append(diagnostics)

    contributions_panel = Panel(
        _contributions_table(report),
        title="[bold]Contributions[/]",
        border_style="cyan",
    )

    outer_panel = Panel(
        Group(Columns(top, equal=True, expand=True), "", contributions_panel),
        title="[bold white]Binance AUM[/]",
        border_style="white",
        padding=(1, 2),
    )

    console.print()
    console.print(outer_panel)
    console.print()
