"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from src.core.calculator import ChargeCalculator
from src.core.ledger import InvoiceLedger
from src.core.street_turns import StreetTurnMatcher
from src.models.schema import BusinessRules
from tests.test_fixtures import FixedClock


@pytest.fixture
def business_rules():
    """Default business rules."""
    return BusinessRules.default()


@pytest.fixture
def calculator(business_rules):
    """Charge calculator over the default rules."""
    return ChargeCalculator(business_rules)


@pytest.fixture
def clock():
    """Controllable clock starting 2024-03-01 09:00 UTC."""
    return FixedClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(business_rules, clock):
    """Invoice ledger with the default billing rules and a fixed clock."""
    return InvoiceLedger(business_rules.billing, clock=clock)


@pytest.fixture
def matcher(business_rules):
    """Street-turn matcher with the default savings."""
    return StreetTurnMatcher(business_rules.street_turn)
