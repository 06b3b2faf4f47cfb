"""Solana wallet address validation."""

import re
from typing import Any

# Base-58 alphabet (no 0, O, I, l), 32-44 characters
SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_solana_address(address: Any) -> bool:
    """
    Check whether a string looks like a Solana public key.

    Only the surface syntax is checked; the key is not decoded and no
    network access is made.

    Examples:
        is_valid_solana_address("11111111111111111111111111111111") -> True
        is_valid_solana_address("0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045") -> False
    """
    if not isinstance(address, str):
        return False
    return SOLANA_ADDRESS_PATTERN.fullmatch(address) is not None
