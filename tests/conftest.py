"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from realvest.main import app
from realvest.calculations.cashflow import Scenario


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def scenario_a():
    """Single-family rental with strongly positive NPV at a 10% discount rate."""
    return Scenario(
        purchase_price=200000,
        down_payment_percent=20,
        annual_rental_income=24000,
        annual_expenses=8000,
        vacancy_rate=5,
        interest_rate=7,
        loan_term_years=30,
        appreciation_rate=3,
        holding_period_years=5,
    )


@pytest.fixture
def losing_scenario():
    """Rental whose NPV stays negative even with a near-zero interest rate."""
    return Scenario(
        purchase_price=200000,
        down_payment_percent=20,
        annual_rental_income=12000,
        annual_expenses=12000,
        vacancy_rate=5,
        interest_rate=7,
        loan_term_years=30,
        appreciation_rate=0,
        holding_period_years=5,
    )


@pytest.fixture
def scenario_a_params():
    """Scenario A as a request payload."""
    return {
        "purchase_price": 200000,
        "down_payment_percent": 20,
        "annual_rental_income": 24000,
        "annual_expenses": 8000,
        "vacancy_rate": 5,
        "interest_rate": 7,
        "loan_term_years": 30,
        "appreciation_rate": 3,
        "holding_period_years": 5,
    }
