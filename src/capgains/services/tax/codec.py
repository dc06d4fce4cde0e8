"""Wire codec for transaction runs.

Input is a JSON array of transaction records; output is a JSON array of
``{"tax": "<amount>"}`` objects in compact form, for example::

    [{"operation":"buy", "unit-cost":10.00, "quantity":100}]
    [{"tax":"0.00"}]

Numbers with a fractional part are decoded as Decimal so money arithmetic
stays exact.
"""

import json
from decimal import Decimal
from typing import Any, Iterable

from capgains.services.tax.errors import MalformedRecordError
from capgains.services.tax.models import TaxResult


def decode_records(text: str) -> list[dict[str, Any]]:
    """
    Decode one run of transaction records.

    Args:
        text: JSON array of record objects

    Returns:
        List of raw record dicts

    Raises:
        MalformedRecordError: If text is not valid JSON or not an array of objects
    """
    try:
        payload = json.loads(text, parse_float=Decimal)
    except ValueError as e:
        raise MalformedRecordError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, list):
        raise MalformedRecordError(f"Expected a JSON array of transactions, got {type(payload).__name__}")

    for index, record in enumerate(payload):
        if not isinstance(record, dict):
            raise MalformedRecordError(f"Expected an object, got {type(record).__name__}", index=index)

    return payload


def encode_results(results: Iterable[TaxResult]) -> str:
    """
    Encode tax results as a compact JSON array.

    Args:
        results: Tax results in input order

    Returns:
        JSON text such as ``[{"tax":"0.00"},{"tax":"3200.00"}]``
    """
    return json.dumps([r.model_dump(mode="json") for r in results], separators=(",", ":"))
