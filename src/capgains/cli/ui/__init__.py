"""CLI UI components - Rich formatters."""

from capgains.cli.ui.formatters import add_step_row, build_breakdown_table, create_breakdown_table

__all__ = [
    "add_step_row",
    "build_breakdown_table",
    "create_breakdown_table",
]
