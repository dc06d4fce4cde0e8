"""Tax processor interface (Protocol).

Defines the contract the I/O shell relies on, so the CLI can be tested
against a stand-in processor.
"""

from typing import Iterator, Protocol

from capgains.services.tax.models import Portfolio, TaxResult
from capgains.services.tax.processor import TransactionStep


class ITransactionProcessor(Protocol):
    """Processor interface for one run of transactions.

    Core responsibilities:
    - Apply transactions in input order to one portfolio lineage
    - Report the tax owed on each transaction

    NOT responsible for:
    - Decoding or encoding the wire format (codec does this)
    - Mapping raw records to transactions (TransactionFactory does this)
    - Presenting errors to the user (CLI does this)
    """

    def process(self, initial_portfolio: Portfolio | None = None) -> list[TaxResult]:
        """Apply every transaction and return one TaxResult per transaction.

        Raises:
            PortfolioStateError: If a transaction cannot be applied
        """
        ...

    def steps(self, initial_portfolio: Portfolio | None = None) -> Iterator[TransactionStep]:
        """Yield the before/after state of each applied transaction."""
        ...
