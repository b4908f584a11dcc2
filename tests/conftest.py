"""
conftest.py - Shared pytest fixtures for settlement tests

Provides common fixtures used across unit, functional and conformance tests:
- The sample snapshot and definitions of the two-denom walkthrough
- Single-denom definitions with and without fees
- A flattening helper for comparing deltas independent of order
"""

import pytest
from fractions import Fraction
from typing import Dict, Iterable

from multisend import (
    Balance, TokenDefinition, TransferRequest,
    balance, token,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def delta_map(records: Iterable[Balance]) -> Dict[str, Dict[str, int]]:
    """Flatten a list of Balance records to {address: {denom: amount}}."""
    return {record.address: record.as_dict() for record in records}


@pytest.fixture
def as_map():
    """Expose delta_map() to tests without importing conftest."""
    return delta_map


# =============================================================================
# SAMPLE FIXTURES
# =============================================================================

@pytest.fixture
def sample_snapshot():
    """account1 holds denom1, account2 holds denom2."""
    return [
        balance("account1", {"denom1": 1_000_000}),
        balance("account2", {"denom2": 1_000_000}),
    ]


@pytest.fixture
def sample_definitions():
    """denom1 burns 8% and charges 12% commission; denom2 burns 100%."""
    return [
        token("denom1", "issuer_account_A", burn_rate="0.08", commission_rate="0.12"),
        token("denom2", "issuer_account_B", burn_rate="1", commission_rate="0"),
    ]


@pytest.fixture
def sample_request():
    """account1 and account2 each send 1000 of their denom to one recipient."""
    return TransferRequest(
        inputs=[
            balance("account1", {"denom1": 1000}),
            balance("account2", {"denom2": 1000}),
        ],
        outputs=[
            balance("account_recipient", {"denom1": 1000, "denom2": 1000}),
        ],
    )


@pytest.fixture
def fee_free_definitions():
    """denom1 with no burn and no commission."""
    return [TokenDefinition("denom1", "issuer_account_A", Fraction(0), Fraction(0))]


@pytest.fixture
def denom1_definitions():
    """denom1 alone, 8% burn and 12% commission."""
    return [token("denom1", "issuer_account_A", burn_rate="0.08", commission_rate="0.12")]


@pytest.fixture
def funded_snapshot():
    """Two senders with a million denom1 each."""
    return [
        balance("account1", {"denom1": 1_000_000}),
        balance("account2", {"denom1": 1_000_000}),
    ]
