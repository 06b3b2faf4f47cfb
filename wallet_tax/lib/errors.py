"""
Exception hierarchy for the wallet tax estimator.

Provider failures (ProviderError and its subclasses) are recoverable and are
absorbed by the fallback chain. InvalidAddressError is the only error the
PNL entry points surface to their callers.
"""

from typing import Optional


class WalletTaxError(Exception):
    """Base class for all wallet tax estimator errors."""

    pass


class InvalidAddressError(WalletTaxError, ValueError):
    """Raised when a wallet address fails base-58 syntax validation."""

    def __init__(self, address: str):
        super().__init__(f"Invalid Solana wallet address: {address!r}")
        self.address = address


class ProviderError(WalletTaxError):
    """Base class for failures of an external PNL data provider."""

    pass


class ConfigurationError(ProviderError):
    """Raised when a provider's required credential is not configured."""

    pass


class UpstreamUnavailableError(ProviderError):
    """Raised for non-success HTTP statuses and network failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(UpstreamUnavailableError):
    """Raised when rate limit retries are exhausted."""

    pass


class MalformedResponseError(UpstreamUnavailableError):
    """Raised when a provider returns a payload of unexpected shape."""

    pass
