"""Test configuration and fixtures for tax service tests."""

from decimal import Decimal

import pytest

from capgains.services.tax.models import Portfolio


@pytest.fixture
def empty_portfolio():
    """Portfolio with no shares, no average price and no losses."""
    return Portfolio()


@pytest.fixture
def holding_portfolio():
    """Portfolio holding 100 shares at an average of $10."""
    return Portfolio(average_buy_price=Decimal("10.00"), current_shares=100)
