"""Rich table formatters for CLI output."""

from decimal import Decimal
from typing import Iterable

from rich.table import Table

from capgains.services.tax.processor import TransactionStep


def create_breakdown_table(title: str) -> Table:
    """
    Create a Rich table for a per-transaction breakdown of one run.

    Args:
        title: Table title (usually the input name)

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Operation", style="cyan", no_wrap=True)
    table.add_column("Unit Cost", justify="right")
    table.add_column("Quantity", justify="right")
    table.add_column("Tax", style="magenta", justify="right")
    table.add_column("Shares", style="yellow", justify="right")
    table.add_column("Avg Price", justify="right")
    table.add_column("Losses", style="red", justify="right")
    return table


def add_step_row(table: Table, step: TransactionStep) -> None:
    """
    Add one applied transaction to a breakdown table.

    Args:
        table: Rich Table instance
        step: Applied transaction with its resulting portfolio
    """
    txn = step.transaction
    after = step.after
    style = "green" if txn.operation == "buy" else None
    tax_str = f"{step.tax:,.2f}"
    if step.tax > 0:
        tax_str = f"[bold]{tax_str}[/bold]"

    table.add_row(
        str(step.index + 1),
        txn.operation,
        f"${txn.unit_cost:,.2f}",
        f"{txn.quantity:,}",
        tax_str,
        f"{after.current_shares:,}",
        f"${after.average_buy_price:,.2f}",
        f"${after.cumulative_losses:,.2f}",
        style=style,
    )


def build_breakdown_table(title: str, steps: Iterable[TransactionStep]) -> Table:
    """
    Create and populate a breakdown table, with a total tax caption.

    Args:
        title: Table title
        steps: Applied transactions in order

    Returns:
        Populated Rich Table
    """
    table = create_breakdown_table(title)
    total_tax = Decimal("0")
    for step in steps:
        add_step_row(table, step)
        total_tax += step.tax
    table.caption = f"Total tax: ${total_tax:,.2f}"
    return table
