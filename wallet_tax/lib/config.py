"""
Runtime configuration for the wallet tax estimator.

Values are read from the environment (and an optional .env file). The
dust thresholds and price constants are deployment policy, not derived
constraints, so they live here rather than in the parsing code.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WalletTaxSettings(BaseSettings):
    """Settings for providers, thresholds and timeouts."""

    helius_api_key: Optional[str] = None
    max_transactions: int = Field(default=1000, gt=0)
    sol_dust_threshold: float = 0.00001
    stablecoin_dust_threshold: float = 0.01
    price_max_age_seconds: float = Field(default=60.0, ge=0)
    fallback_sol_price: float = Field(default=200.0, gt=0)
    demo_sol_price: float = Field(default=100.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=None)
def get_settings() -> WalletTaxSettings:
    return WalletTaxSettings()
