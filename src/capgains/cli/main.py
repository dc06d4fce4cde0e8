"""capgains CLI main entry point."""

import click

from capgains import __version__
from capgains.cli.commands import calculate_command


@click.group()
@click.version_option(version=__version__)
def main():
    """capgains - Capital Gains Tax Calculator"""
    pass


# Register commands
main.add_command(calculate_command)


if __name__ == "__main__":
    main()
