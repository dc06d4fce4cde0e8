"""Tax calculation command."""

import sys
from functools import partial
from pathlib import Path
from typing import Callable, Iterator, Optional

import click
from rich.console import Console
from rich.markup import escape

from capgains.cli.ui.formatters import build_breakdown_table
from capgains.services.tax import (
    CapitalGainsError,
    ITransactionProcessor,
    MalformedRecordError,
    TransactionProcessor,
    decode_records,
    encode_results,
    parse_transactions,
)
from capgains.system import LoggerFactory
from capgains.system.config import get_system_config, reload_system_config

err_console = Console(stderr=True)
logger = LoggerFactory.get_logger()


def run_transactions(text: str, source: str, breakdown: bool = False) -> str:
    """
    Compute taxes for one run of transactions.

    Args:
        text: JSON array of transaction records
        source: Name of the input (file name or "stdin:<line>")
        breakdown: Render a per-transaction table on stderr

    Returns:
        Encoded JSON tax results

    Raises:
        CapitalGainsError: If the run cannot be decoded, parsed or applied
    """
    records = decode_records(text)
    processor: ITransactionProcessor = TransactionProcessor(parse_transactions(records))

    if breakdown:
        steps = list(processor.steps())
        err_console.print(build_breakdown_table(escape(source), steps))
        results = [step.result for step in steps]
    else:
        results = processor.process()

    logger.info("cli.calculate.run_completed", source=source, transactions=len(results))
    return encode_results(results)


def _decode_input(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedRecordError(f"Cannot read input: {e}") from e


def _read_file(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise MalformedRecordError(f"Cannot read input: {e}") from e
    return _decode_input(raw)


def _iter_inputs(files: tuple[Path, ...]) -> Iterator[tuple[str, Callable[[], str] | None]]:
    """
    Yield (source, load) per input unit; load is None for a missing file.

    Reading and decoding are deferred to ``load`` so a unit that cannot be
    read fails on its own instead of ending the iteration.
    """
    if not files:
        for lineno, raw in enumerate(sys.stdin.buffer, start=1):
            if raw.strip():
                yield f"stdin:{lineno}", partial(_decode_input, raw)
        return

    for path in files:
        if not path.exists():
            yield str(path), None
        else:
            yield str(path), partial(_read_file, path)


@click.command("calculate")
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--breakdown",
    "-b",
    is_flag=True,
    default=False,
    help="Show a per-transaction table (tax, shares, average price, losses) on stderr",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to system configuration file (YAML)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level (DEBUG shows every applied transaction)",
)
def calculate_command(
    files: tuple[Path, ...],
    breakdown: bool,
    config_file: Optional[Path],
    log_level: Optional[str],
):
    """
    Calculate capital-gains tax for buy/sell transaction lists.

    Each input line on stdin (or each FILE) is one independent list of
    transactions, encoded as a JSON array. One JSON array of tax results is
    printed to stdout per input, in order.

    \b
    Examples:
        # Interactive / piped input, one run per line
        echo '[{"operation":"buy", "unit-cost":10.00, "quantity":100}]' | capgains calculate

        # One run per file
        capgains calculate case1.json case2.json

        # Show the per-transaction breakdown
        capgains calculate -b case1.json

    \b
    Exit status:
        0 if every input was processed, 1 if any input failed
    """
    system_config = reload_system_config(config_file) if config_file else get_system_config()

    logger_config = system_config.logging.to_logger_config()
    if log_level:
        logger_config = logger_config.model_copy(update={"level": log_level.upper()})
    LoggerFactory.configure(logger_config)

    if not breakdown:
        breakdown = system_config.output.breakdown

    failures = 0
    for source, load in _iter_inputs(files):
        if load is None:
            logger.warning("cli.calculate.file_not_found", source=source)
            click.echo(f"File not found: {source}")
            continue

        try:
            output = run_transactions(load(), source, breakdown=breakdown)
        except CapitalGainsError as e:
            failures += 1
            logger.error("cli.calculate.run_failed", source=source, error=str(e), error_type=type(e).__name__)
            err_console.print(f"[bold red]✗ {escape(source)}:[/bold red] {escape(str(e))}")
            continue

        click.echo(output)

    sys.exit(1 if failures else 0)
