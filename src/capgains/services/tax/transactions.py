"""Transaction variants.

Buy and sell are members of a tagged union discriminated by ``operation``.
Each variant computes its tax and the next Portfolio in a single pure step;
the portfolio passed in is never modified.
"""

from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from capgains.services.tax.errors import PortfolioStateError
from capgains.services.tax.models import ZERO, Portfolio


class BaseTransaction(BaseModel):
    """Fields shared by every transaction variant.

    Attributes:
        operation: Variant tag ("buy" or "sell")
        unit_cost: Price per share (wire name ``unit-cost``)
        quantity: Shares bought or sold
    """

    operation: str
    unit_cost: Decimal = Field(alias="unit-cost")
    quantity: int

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("unit_cost")
    @classmethod
    def validate_unit_cost(cls, v: Decimal) -> Decimal:
        """Validate unit cost is non-negative."""
        if v < 0:
            raise ValueError(f"Unit cost cannot be negative, got {v}")
        return v

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        """Validate quantity is positive."""
        if v <= 0:
            raise ValueError(f"Quantity must be positive, got {v}")
        return v

    @property
    def total_amount(self) -> Decimal:
        """unit_cost * quantity."""
        return self.unit_cost * self.quantity


class BuyTransaction(BaseTransaction):
    """Purchase of shares. Recomputes the average price; never taxed."""

    operation: Literal["buy"] = "buy"

    def apply_to(self, portfolio: Portfolio) -> tuple[Decimal, Portfolio]:
        """
        Apply the purchase to a portfolio.

        Args:
            portfolio: State before the purchase

        Returns:
            Tuple of (tax, next portfolio); tax is always zero

        Raises:
            PortfolioStateError: If the purchase leaves zero shares held
                (only reachable after an oversell), which makes the average
                price undefined
        """
        total_cost = portfolio.average_buy_price * portfolio.current_shares + self.total_amount
        new_shares = portfolio.current_shares + self.quantity
        if new_shares == 0:
            raise PortfolioStateError(
                f"Cannot compute average buy price: buying {self.quantity} shares leaves zero shares held"
            )

        next_portfolio = Portfolio(
            average_buy_price=total_cost / new_shares,
            current_shares=new_shares,
            cumulative_losses=portfolio.cumulative_losses,
        )
        return ZERO, next_portfolio


class SellTransaction(BaseTransaction):
    """Sale of shares. Realizes profit or loss against the average price."""

    operation: Literal["sell"] = "sell"

    def apply_to(self, portfolio: Portfolio) -> tuple[Decimal, Portfolio]:
        """
        Apply the sale to a portfolio.

        Profit is first offset against carried losses; what remains is taxed
        if the sale amount is above the exemption threshold. A loss is added
        to the carried losses. Selling more shares than held is allowed and
        leaves a negative share count.

        Args:
            portfolio: State before the sale

        Returns:
            Tuple of (tax, next portfolio)
        """
        total_sale_amount = self.total_amount
        total_cost_basis = portfolio.average_buy_price * self.quantity
        profit_or_loss = total_sale_amount - total_cost_basis

        if profit_or_loss > 0:
            remaining_profit, cumulative_losses = portfolio.deduct_cumulative_losses(profit_or_loss)
            tax = Portfolio.calculate_tax(remaining_profit, total_sale_amount)
        else:
            cumulative_losses = portfolio.cumulative_losses + abs(profit_or_loss)
            tax = ZERO

        next_portfolio = Portfolio(
            average_buy_price=portfolio.average_buy_price,
            current_shares=portfolio.current_shares - self.quantity,
            cumulative_losses=cumulative_losses,
        )
        return tax, next_portfolio


Transaction = Annotated[Union[BuyTransaction, SellTransaction], Field(discriminator="operation")]
