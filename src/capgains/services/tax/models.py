"""Data models for capital-gains tax calculation.

Defines the state and output entities:
- Portfolio: Average-cost position snapshot with carried losses
- TaxResult: Tax owed on a single transaction
- Tax constants: Fixed exemption threshold and rate
"""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Sales at or below this total amount are never taxed
SALE_EXEMPTION_THRESHOLD = Decimal("20000")
TAX_RATE = Decimal("0.20")

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def round_to_cents(amount: Decimal) -> Decimal:
    """Quantize an amount to two fractional digits (half-up)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class Portfolio(BaseModel):
    """
    Position snapshot for a single asset under average-cost accounting.

    Each transaction produces a new Portfolio; instances are never mutated.

    Attributes:
        average_buy_price: Weighted average cost per share of current holdings
        current_shares: Shares currently held (negative after an oversell)
        cumulative_losses: Losses carried forward to offset future profit

    Example:
        >>> portfolio = Portfolio(average_buy_price=Decimal("10"), current_shares=100)
        >>> remaining, losses = portfolio.deduct_cumulative_losses(Decimal("500"))
        >>> remaining
        Decimal('500')
    """

    average_buy_price: Decimal = ZERO
    current_shares: int = 0
    cumulative_losses: Decimal = ZERO

    model_config = ConfigDict(frozen=True)

    @field_validator("cumulative_losses")
    @classmethod
    def validate_cumulative_losses(cls, v: Decimal) -> Decimal:
        """Validate cumulative losses are non-negative."""
        if v < 0:
            raise ValueError(f"Cumulative losses cannot be negative, got {v}")
        return v

    def deduct_cumulative_losses(self, profit: Decimal) -> tuple[Decimal, Decimal]:
        """
        Offset a realized profit against carried losses.

        Args:
            profit: Realized profit from a sale (positive)

        Returns:
            Tuple of (remaining taxable profit, cumulative losses afterwards)

        Examples:
            >>> Portfolio(cumulative_losses=Decimal("300")).deduct_cumulative_losses(Decimal("100"))
            (Decimal('0'), Decimal('200'))
            >>> Portfolio(cumulative_losses=Decimal("100")).deduct_cumulative_losses(Decimal("300"))
            (Decimal('200'), Decimal('0'))
        """
        losses = self.cumulative_losses
        if losses <= 0:
            return profit, ZERO
        if losses >= profit:
            return ZERO, losses - profit
        return profit - losses, ZERO

    @staticmethod
    def calculate_tax(profit: Decimal, total_sale_amount: Decimal) -> Decimal:
        """
        Calculate tax on a sale's taxable profit.

        Tax applies only when the sale amount is strictly above
        SALE_EXEMPTION_THRESHOLD and there is profit left to tax.

        Args:
            profit: Taxable profit after loss offsetting
            total_sale_amount: unit cost * quantity of the sale

        Returns:
            Tax rounded to cents
        """
        if total_sale_amount > SALE_EXEMPTION_THRESHOLD and profit > 0:
            return round_to_cents(profit * TAX_RATE)
        return round_to_cents(ZERO)


class TaxResult(BaseModel):
    """
    Tax owed on one transaction.

    Serializes to the wire format {"tax": "<amount>"} with exactly two
    fractional digits.

    Example:
        >>> TaxResult(tax=Decimal("3200")).model_dump(mode="json")
        {'tax': '3200.00'}
    """

    tax: Decimal = Field(default=ZERO)

    model_config = ConfigDict(frozen=True)

    @field_validator("tax")
    @classmethod
    def validate_tax(cls, v: Decimal) -> Decimal:
        """Validate tax is non-negative and normalize to cents."""
        if v < 0:
            raise ValueError(f"Tax cannot be negative, got {v}")
        return round_to_cents(v)

    @field_serializer("tax")
    def _serialize_tax(self, v: Decimal) -> str:
        return f"{v:.2f}"

    @property
    def formatted(self) -> str:
        """Tax formatted with two fractional digits."""
        return f"{self.tax:.2f}"
