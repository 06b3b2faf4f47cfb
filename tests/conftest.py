"""
Pytest configuration and shared fixtures for wallet-tax tests.
"""

import pytest

from wallet_tax.lib.config import WalletTaxSettings


@pytest.fixture
def sample_solana_address():
    """Sample Solana wallet address for testing."""
    return "GKvqsuNcnwWqPzzuhLmGi4rzzh55FhJtGizkhHaEJqiV"


@pytest.fixture
def counterparty_address():
    """Address of the other side of a swap (AMM pool / router)."""
    return "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"


@pytest.fixture
def mock_helius_api_key():
    """Mock Helius API key for testing."""
    return "test-helius-key-12345"


@pytest.fixture
def settings(mock_helius_api_key):
    """Settings with a configured key and default thresholds."""
    return WalletTaxSettings(_env_file=None, helius_api_key=mock_helius_api_key)
