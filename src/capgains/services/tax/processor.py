"""Transaction processor.

Folds an ordered list of transactions over an evolving Portfolio and
collects the tax owed on each one.
"""

from dataclasses import dataclass
from decimal import Decimal, DecimalException
from typing import Any, Iterable, Iterator, Mapping, Sequence

from capgains.services.tax.errors import PortfolioStateError
from capgains.services.tax.factory import parse_transactions
from capgains.services.tax.models import Portfolio, TaxResult
from capgains.services.tax.transactions import BaseTransaction
from capgains.system import LoggerFactory

logger = LoggerFactory.get_logger()


@dataclass(frozen=True)
class TransactionStep:
    """Outcome of applying one transaction.

    Attributes:
        index: Position of the transaction in its run (0-based)
        transaction: Transaction that was applied
        tax: Tax owed on the transaction
        before: Portfolio the transaction was applied to
        after: Portfolio produced by the transaction
    """

    index: int
    transaction: BaseTransaction
    tax: Decimal
    before: Portfolio
    after: Portfolio

    @property
    def result(self) -> TaxResult:
        return TaxResult(tax=self.tax)


class TransactionProcessor:
    """Applies transactions in order to a single portfolio lineage.

    Result ``i`` depends on transactions ``0..i``. There is no error
    recovery: a fault while applying a transaction stops the run and
    propagates to the caller.

    Example:
        >>> processor = TransactionProcessor([
        ...     BuyTransaction(unit_cost=Decimal("10"), quantity=1000),
        ...     SellTransaction(unit_cost=Decimal("30"), quantity=800),
        ... ])
        >>> [r.formatted for r in processor.process()]
        ['0.00', '3200.00']
    """

    def __init__(self, transactions: Sequence[BaseTransaction]) -> None:
        self.transactions = list(transactions)

    def steps(self, initial_portfolio: Portfolio | None = None) -> Iterator[TransactionStep]:
        """
        Apply each transaction lazily, yielding the before/after state.

        Args:
            initial_portfolio: Starting state (empty portfolio if None)

        Yields:
            TransactionStep per transaction, in input order

        Raises:
            PortfolioStateError: If a transaction cannot be applied, including
                decimal faults such as overflow on huge amounts
        """
        portfolio = initial_portfolio if initial_portfolio is not None else Portfolio()

        for index, transaction in enumerate(self.transactions):
            try:
                tax, next_portfolio = transaction.apply_to(portfolio)
            except DecimalException as e:
                raise PortfolioStateError(f"Arithmetic fault applying transaction {index}: {e!r}") from e

            logger.debug(
                "tax.processor.transaction_applied",
                index=index,
                operation=transaction.operation,
                unit_cost=str(transaction.unit_cost),
                quantity=transaction.quantity,
                tax=str(tax),
                shares=next_portfolio.current_shares,
                average_buy_price=str(next_portfolio.average_buy_price),
                cumulative_losses=str(next_portfolio.cumulative_losses),
            )

            yield TransactionStep(
                index=index,
                transaction=transaction,
                tax=tax,
                before=portfolio,
                after=next_portfolio,
            )
            portfolio = next_portfolio

    def process(self, initial_portfolio: Portfolio | None = None) -> list[TaxResult]:
        """
        Apply every transaction and collect the tax results.

        Args:
            initial_portfolio: Starting state (empty portfolio if None)

        Returns:
            One TaxResult per transaction, in input order
        """
        results = [step.result for step in self.steps(initial_portfolio)]

        logger.info(
            "tax.processor.run_completed",
            transactions=len(results),
            total_tax=str(sum((r.tax for r in results), Decimal("0"))),
        )
        return results


def process_transactions(
    records: Iterable[Mapping[str, Any]], initial_portfolio: Portfolio | None = None
) -> list[TaxResult]:
    """
    Parse raw records and compute the tax on each transaction.

    Args:
        records: Raw transaction records
        initial_portfolio: Starting state (empty portfolio if None)

    Returns:
        One TaxResult per record, in input order

    Raises:
        UnsupportedOperationError: If a record has an unknown operation
        MalformedRecordError: If a record is malformed
        PortfolioStateError: If a transaction cannot be applied
    """
    transactions = parse_transactions(records)
    return TransactionProcessor(transactions).process(initial_portfolio)
