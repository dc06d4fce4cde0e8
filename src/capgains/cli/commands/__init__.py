"""Commands __init__ - exports all commands."""

from capgains.cli.commands.calculate import calculate_command

__all__ = ["calculate_command"]
