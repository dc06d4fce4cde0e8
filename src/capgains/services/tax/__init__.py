"""Capital-gains tax service.

Computes the tax owed on each transaction of a buy/sell sequence under
average-cost accounting, with losses carried forward to offset future
profit and a sale-amount exemption threshold.

Key components:
- Portfolio: Immutable position snapshot (average price, shares, losses)
- BuyTransaction / SellTransaction: Transaction variants with apply_to()
- TransactionFactory: Raw record -> transaction dispatch
- TransactionProcessor: Sequential fold producing TaxResults
- Codec: JSON wire decoding/encoding

Example:
    >>> from capgains.services.tax import decode_records, encode_results, process_transactions
    >>>
    >>> records = decode_records('[{"operation":"buy", "unit-cost":10.00, "quantity":100}]')
    >>> encode_results(process_transactions(records))
    '[{"tax":"0.00"}]'
"""

from capgains.services.tax.codec import decode_records, encode_results
from capgains.services.tax.errors import (
    CapitalGainsError,
    MalformedRecordError,
    PortfolioStateError,
    UnsupportedOperationError,
)
from capgains.services.tax.factory import TransactionFactory, parse_transactions
from capgains.services.tax.interface import ITransactionProcessor
from capgains.services.tax.models import SALE_EXEMPTION_THRESHOLD, TAX_RATE, Portfolio, TaxResult
from capgains.services.tax.processor import TransactionProcessor, TransactionStep, process_transactions
from capgains.services.tax.transactions import BaseTransaction, BuyTransaction, SellTransaction, Transaction

__all__ = [
    # Processing
    "ITransactionProcessor",
    "TransactionProcessor",
    "TransactionStep",
    "process_transactions",
    # Parsing
    "TransactionFactory",
    "parse_transactions",
    "decode_records",
    "encode_results",
    # Models
    "Portfolio",
    "TaxResult",
    "BaseTransaction",
    "BuyTransaction",
    "SellTransaction",
    "Transaction",
    "SALE_EXEMPTION_THRESHOLD",
    "TAX_RATE",
    # Errors
    "CapitalGainsError",
    "UnsupportedOperationError",
    "MalformedRecordError",
    "PortfolioStateError",
]
