"""
SOL/USD price lookup via the CoinGecko simple price endpoint.
"""

import logging
import time
from typing import Callable, Optional

import requests


logger = logging.getLogger(__name__)

COINGECKO_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"

DEFAULT_FALLBACK_PRICE = 200.0
DEFAULT_MAX_AGE = 60.0  # seconds
DEFAULT_TIMEOUT = 10.0  # seconds


class CoinGeckoPriceOracle:
    """
    Current SOL price in USD.

    Price is only a multiplier on the SOL PNL, so a failed lookup degrades
    to a fixed fallback price instead of failing the caller. A fetched
    price is reused for up to `max_age` seconds.
    """

    def __init__(
        self,
        fallback_price: float = DEFAULT_FALLBACK_PRICE,
        max_age: float = DEFAULT_MAX_AGE,
        timeout: float = DEFAULT_TIMEOUT,
        url: str = COINGECKO_PRICE_URL,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fallback_price = fallback_price
        self.max_age = max_age
        self.timeout = timeout
        self.url = url
        self.session = session or requests.Session()
        self.clock = clock
        self._cached_price: Optional[float] = None
        self._fetched_at: Optional[float] = None

    def _is_fresh(self) -> bool:
        if self._cached_price is None or self._fetched_at is None:
            return False
        return self.clock() - self._fetched_at < self.max_age

    def _fetch_price(self) -> float:
        response = self.session.get(
            self.url,
            params={"ids": "solana", "vs_currencies": "usd"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()
        price = float((data.get("solana") or {}).get("usd") or 0)
        if price <= 0:
            raise ValueError(f"Missing SOL price in response: {data!r}")
        return price

    def get_sol_price(self) -> float:
        """
        Get the SOL price in USD.

        Returns:
            The fetched (or still fresh cached) price, or the fallback price
        """
        if self._is_fresh():
            return self._cached_price  # type: ignore[return-value]

        try:
            price = self._fetch_price()
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            logger.warning(
                "Error fetching SOL price, using fallback $%.2f: %s", self.fallback_price, e
            )
            return self.fallback_price

        self._cached_price = price
        self._fetched_at = self.clock()
        return price
