"""Unit tests for transaction factory and record validation."""

from decimal import Decimal

import pytest

from capgains.services.tax.codec import decode_records
from capgains.services.tax.errors import MalformedRecordError, UnsupportedOperationError
from capgains.services.tax.factory import TransactionFactory, load_and_compile_schema, parse_transactions
from capgains.services.tax.transactions import BuyTransaction, SellTransaction


class TestCreateTransaction:
    """Test dispatch on the operation tag."""

    def test_buy_record(self):
        """Test "buy" creates a BuyTransaction."""
        txn = TransactionFactory.create_transaction({"operation": "buy", "unit-cost": Decimal("10.00"), "quantity": 100})

        assert isinstance(txn, BuyTransaction)
        assert txn.unit_cost == Decimal("10.00")
        assert txn.quantity == 100

    def test_sell_record(self):
        """Test "sell" creates a SellTransaction."""
        txn = TransactionFactory.create_transaction({"operation": "sell", "unit-cost": 15, "quantity": 50})

        assert isinstance(txn, SellTransaction)
        assert txn.unit_cost == Decimal("15")

    def test_unknown_operation_raises(self):
        """Test unrecognized operations are rejected with the offending value."""
        with pytest.raises(UnsupportedOperationError, match="Unknown operation type: transfer") as exc_info:
            TransactionFactory.create_transaction({"operation": "transfer", "unit-cost": 10, "quantity": 1})

        assert exc_info.value.operation == "transfer"

    def test_operation_is_case_sensitive(self):
        """Test "BUY" is not accepted."""
        with pytest.raises(UnsupportedOperationError):
            TransactionFactory.create_transaction({"operation": "BUY", "unit-cost": 10, "quantity": 1})

    def test_missing_operation_raises(self):
        """Test a record without an operation is unsupported."""
        with pytest.raises(UnsupportedOperationError) as exc_info:
            TransactionFactory.create_transaction({"unit-cost": 10, "quantity": 1})

        assert exc_info.value.operation is None

    def test_unknown_operation_reported_before_bad_fields(self):
        """Test operation dispatch happens before field validation."""
        with pytest.raises(UnsupportedOperationError):
            TransactionFactory.create_transaction({"operation": "gift"})

    def test_extra_keys_ignored(self):
        """Test unknown keys in a record are ignored."""
        txn = TransactionFactory.create_transaction(
            {"operation": "buy", "unit-cost": 10, "quantity": 1, "ticker": "ACME"}
        )

        assert isinstance(txn, BuyTransaction)

    def test_integral_decimal_quantity_accepted(self):
        """Test a quantity written as 100.0 on the wire is the integer 100."""
        record = decode_records('[{"operation":"sell", "unit-cost":20.00, "quantity": 100.0}]')[0]

        txn = TransactionFactory.create_transaction(record)

        assert txn.quantity == 100
        assert isinstance(txn.quantity, int)
        assert record["quantity"] == Decimal("100.0")

    def test_fractional_wire_quantity_still_rejected(self):
        record = decode_records('[{"operation":"sell", "unit-cost":20.00, "quantity": 1.5}]')[0]

        with pytest.raises(MalformedRecordError, match="quantity"):
            TransactionFactory.create_transaction(record)


class TestMalformedRecords:
    """Test contract validation of unit-cost and quantity."""

    def test_missing_quantity(self):
        with pytest.raises(MalformedRecordError, match="quantity"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 10})

    def test_missing_unit_cost(self):
        with pytest.raises(MalformedRecordError, match="unit-cost"):
            TransactionFactory.create_transaction({"operation": "sell", "quantity": 10})

    def test_zero_quantity(self):
        with pytest.raises(MalformedRecordError, match="quantity"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 10, "quantity": 0})

    def test_fractional_quantity(self):
        with pytest.raises(MalformedRecordError, match="quantity"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 10, "quantity": Decimal("1.5")})

    def test_non_numeric_unit_cost(self):
        with pytest.raises(MalformedRecordError, match="unit-cost"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": "ten", "quantity": 1})

    def test_negative_unit_cost(self):
        with pytest.raises(MalformedRecordError, match="unit-cost"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": -1, "quantity": 1})

    def test_boolean_quantity(self):
        with pytest.raises(MalformedRecordError, match="quantity"):
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 1, "quantity": True})

    def test_record_must_be_object(self):
        with pytest.raises(MalformedRecordError, match="Expected an object"):
            TransactionFactory.create_transaction(["buy", 10, 1])  # type: ignore[arg-type]

    def test_error_includes_index(self):
        with pytest.raises(MalformedRecordError, match="Record 3") as exc_info:
            TransactionFactory.create_transaction({"operation": "buy", "unit-cost": 10}, index=3)

        assert exc_info.value.index == 3


class TestParseTransactions:
    """Test parsing of a whole run."""

    def test_preserves_order(self):
        """Test transactions come back in input order."""
        transactions = parse_transactions(
            [
                {"operation": "buy", "unit-cost": 10, "quantity": 100},
                {"operation": "sell", "unit-cost": 15, "quantity": 50},
                {"operation": "sell", "unit-cost": 15, "quantity": 50},
            ]
        )

        assert [t.operation for t in transactions] == ["buy", "sell", "sell"]

    def test_empty_run(self):
        """Test an empty list parses to no transactions."""
        assert parse_transactions([]) == []

    def test_stops_at_unsupported_operation(self):
        """Test parsing does not proceed past an unknown operation."""
        consumed = []

        def records():
            for record in [
                {"operation": "buy", "unit-cost": 10, "quantity": 100},
                {"operation": "transfer", "unit-cost": 10, "quantity": 100},
                {"operation": "sell", "unit-cost": 10, "quantity": 100},
            ]:
                consumed.append(record["operation"])
                yield record

        with pytest.raises(UnsupportedOperationError):
            parse_transactions(records())

        assert consumed == ["buy", "transfer"]

    def test_malformed_record_reports_index(self):
        """Test the failing record's position is reported."""
        with pytest.raises(MalformedRecordError, match="Record 1"):
            parse_transactions(
                [
                    {"operation": "buy", "unit-cost": 10, "quantity": 100},
                    {"operation": "sell", "unit-cost": 10},
                ]
            )


class TestSchemaLoading:
    """Test JSON Schema contract loading."""

    def test_loads_transaction_schema(self):
        validator = load_and_compile_schema("transaction.v1.json")

        assert validator.is_valid({"operation": "buy", "unit-cost": 1, "quantity": 1})

    def test_missing_schema_raises(self):
        with pytest.raises(FileNotFoundError, match="Schema not found"):
            load_and_compile_schema("missing.v1.json")
