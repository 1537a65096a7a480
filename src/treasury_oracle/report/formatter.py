"""Display formatting and rich console tables for treasury snapshots."""

from __future__ import annotations

from datetime import datetime, timezone

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..domain import TreasurySnapshot
from ..processors.bonding_curve import BondingCurve, ChainQuote


def format_usd(amount: float) -> str:
    """Format a USD amount compactly ($1.23M, $4.5K, $0.50, $12)."""
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.2f}M"
    if amount >= 1_000:
        return f"${amount / 1_000:.1f}K"
    if 0 < amount < 1:
        return f"${amount:.2f}"
    return f"${amount:.0f}"


def format_native(amount: float, symbol: str) -> str:
    """Format a native balance; BTC keeps four decimals."""
    if symbol == "BTC":
        return f"{amount:.4f} BTC"
    if amount >= 1_000:
        return f"{amount / 1_000:.1f}K {symbol}"
    return f"{amount:.2f} {symbol}"


def format_tokens(amount: float) -> str:
    """Format a token count with B/M/K suffixes."""
    if amount >= 1_000_000_000:
        return f"{amount / 1_000_000_000:.1f}B"
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.0f}M"
    if amount >= 1_000:
        return f"{amount / 1_000:.0f}K"
    return f"{amount:.0f}"


def format_price(price: float) -> str:
    return f"${price:.4f}"


def _format_timestamp(ts: float) -> str:
    if ts <= 0:
        return "never"
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def build_snapshot_table(snapshot: TreasurySnapshot, curve: BondingCurve) -> Table:
    """Per-chain table with balances and bonding curve figures."""
    quotes = curve.quote_snapshot(snapshot)

    table = Table(title="Treasury Balances", header_style="bold")
    table.add_column("Chain", style="cyan")
    table.add_column("Balance", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("USD", justify="right", style="green")
    table.add_column("Mint Price", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Allocation", justify="right", style="dim")

    for chain in snapshot.chains:
        quote = quotes[chain.chain_id]
        name = chain.name
        if chain.sub_chains:
            name = f"{name}\n[dim]{', '.join(chain.sub_chains)}[/]"
        table.add_row(
            name,
            format_native(chain.native_balance, chain.symbol),
            format_usd(chain.price),
            format_usd(chain.usd_value),
            format_price(quote.price),
            f"{quote.progress_pct:.2f}%",
            format_tokens(quote.allocation_tokens),
        )
    return table


def build_summary_panel(snapshot: TreasurySnapshot) -> Panel:
    summary = Table(show_header=False, box=None, padding=(0, 1))
    summary.add_column("Key", style="dim")
    summary.add_column("Value", style="green")
    summary.add_row("Network", "testnet" if snapshot.is_testnet else "mainnet")
    summary.add_row("Total Raised", format_usd(snapshot.total_usd))
    summary.add_row("Fund Progress", f"{snapshot.progress_pct:.2f}%")
    summary.add_row("Updated", _format_timestamp(snapshot.last_updated))
    if snapshot.stale:
        summary.add_row("Status", Text("stale (last refresh failed)", style="yellow"))

    return Panel(summary, title="[bold]Summary[/]", border_style="green")


def print_snapshot(
    snapshot: TreasurySnapshot,
    curve: BondingCurve,
    console: Console | None = None,
) -> None:
    """Print the summary panel and per-chain table."""
    console = console or Console()
    console.print(
        Group(build_summary_panel(snapshot), build_snapshot_table(snapshot, curve))
    )


def print_quote(
    quote: ChainQuote,
    tokens: float | None = None,
    usd_amount: float | None = None,
    console: Console | None = None,
) -> None:
    """Print a bonding curve quote for one chain."""
    console = console or Console()

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="cyan")
    table.add_row("Raised", format_usd(quote.raised_usd))
    table.add_row("Cap", format_usd(quote.cap_usd))
    table.add_row("Progress", f"{quote.progress_pct:.2f}%")
    table.add_row("Mint Price", format_price(quote.price))
    table.add_row("Allocation", format_tokens(quote.allocation_tokens))
    if tokens is not None and usd_amount is not None:
        table.add_row(f"Tokens for {format_usd(usd_amount)}", format_tokens(tokens))

    console.print(
        Panel(table, title=f"[bold]{quote.chain_id}[/]", border_style="blue")
    )
