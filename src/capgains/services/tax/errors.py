"""Exceptions raised by the tax calculation core."""

from typing import Any


class CapitalGainsError(Exception):
    """Base exception for tax calculation errors."""

    pass


class UnsupportedOperationError(CapitalGainsError):
    """Transaction record names an operation other than buy or sell."""

    def __init__(self, operation: Any) -> None:
        self.operation = operation
        super().__init__(f"Unknown operation type: {operation}")


class MalformedRecordError(CapitalGainsError):
    """Transaction record is missing fields or carries invalid values."""

    def __init__(self, message: str, index: int | None = None) -> None:
        self.index = index
        if index is not None:
            message = f"Record {index}: {message}"
        super().__init__(message)


class PortfolioStateError(CapitalGainsError):
    """Portfolio reached a state where the requested calculation is undefined."""

    pass
