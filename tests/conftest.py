"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from app.main import app
from app.calculations.models import RecurringExpense, Loan


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def recurring_expenses():
    """Community fees billed monthly plus yearly property tax."""
    return [
        RecurringExpense(amount=100, periodicity="monthly", type="community"),
        RecurringExpense(amount=600, periodicity="yearly", type="ibi"),
    ]


@pytest.fixture
def mortgage():
    """25-year mortgage at 3.5% on a 200k purchase."""
    return Loan(principal=160000, annual_rate_pct=3.5, term_months=300)
