"""
Transaction factory - maps raw records to typed transaction variants.

Records are dictionaries as decoded from the wire:
    {"operation": "buy", "unit-cost": 10.00, "quantity": 100}

Dispatch happens on ``operation`` first, so an unknown operation is always
reported as UnsupportedOperationError even when other fields are also bad.
Remaining fields are validated against the transaction.v1.json contract.
A quantity written with a zero fraction (100.0) counts as the integer 100.
"""

import json
from decimal import Decimal
from functools import lru_cache
from importlib import resources
from typing import Any, ClassVar, Iterable, Mapping

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import best_match
from pydantic import TypeAdapter, ValidationError

from capgains.services.tax.errors import MalformedRecordError, UnsupportedOperationError
from capgains.services.tax.transactions import BaseTransaction, BuyTransaction, SellTransaction, Transaction

SCHEMA_PACKAGE = "capgains.contracts.schemas"
TRANSACTION_SCHEMA = "transaction.v1.json"

_transaction_adapter: TypeAdapter[Any] = TypeAdapter(Transaction)


@lru_cache(maxsize=8)
def load_and_compile_schema(schema_name: str) -> Draft202012Validator:
    """
    Load and compile a JSON Schema validator with caching.

    Args:
        schema_name: Schema filename (e.g., "transaction.v1.json")

    Returns:
        Pre-compiled validator with format checker

    Raises:
        FileNotFoundError: If schema file doesn't exist
    """
    try:
        schema_file = resources.files(SCHEMA_PACKAGE).joinpath(schema_name)
        with schema_file.open("r", encoding="utf-8") as f:
            schema = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Schema not found: {schema_name} in package {SCHEMA_PACKAGE}")

    return Draft202012Validator(schema, format_checker=FormatChecker())


def _normalize_quantity(record: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the record, turning an integral decimal quantity (100.0) into an int."""
    normalized = dict(record)
    quantity = normalized.get("quantity")
    if isinstance(quantity, Decimal) and quantity.is_finite() and quantity == quantity.to_integral_value():
        normalized["quantity"] = int(quantity)
    return normalized


class TransactionFactory:
    """Creates transaction variants from raw records.

    Example:
        >>> txn = TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 10, "quantity": 100})
        >>> type(txn).__name__
        'BuyTransaction'
    """

    OPERATIONS: ClassVar[dict[str, type[BaseTransaction]]] = {
        "buy": BuyTransaction,
        "sell": SellTransaction,
    }

    @classmethod
    def create_transaction(cls, record: Mapping[str, Any], index: int | None = None) -> BaseTransaction:
        """
        Build the transaction variant named by the record's operation.

        Args:
            record: Raw transaction record
            index: Position of the record in its run (for error messages)

        Returns:
            BuyTransaction or SellTransaction

        Raises:
            UnsupportedOperationError: If operation is not "buy" or "sell"
            MalformedRecordError: If the record is not an object or its
                unit-cost/quantity are missing or invalid
        """
        if not isinstance(record, Mapping):
            raise MalformedRecordError(f"Expected an object, got {type(record).__name__}", index=index)

        operation = record.get("operation")
        if not isinstance(operation, str) or operation not in cls.OPERATIONS:
            raise UnsupportedOperationError(operation)

        validator = load_and_compile_schema(TRANSACTION_SCHEMA)
        normalized = _normalize_quantity(record)
        error = best_match(validator.iter_errors(normalized))
        if error is not None:
            location = ".".join(str(p) for p in error.path) or "record"
            raise MalformedRecordError(f"{location}: {error.message}", index=index)

        try:
            return _transaction_adapter.validate_python(normalized)
        except ValidationError as e:
            raise MalformedRecordError(str(e), index=index) from e


def parse_transactions(records: Iterable[Mapping[str, Any]]) -> list[BaseTransaction]:
    """
    Convert raw records into transactions, in order.

    Stops at the first record that cannot be converted.

    Args:
        records: Raw transaction records

    Returns:
        List of transactions in input order

    Raises:
        UnsupportedOperationError: If a record has an unknown operation
        MalformedRecordError: If a record is malformed
    """
    return [TransactionFactory.create_transaction(record, index=i) for i, record in enumerate(records)]
