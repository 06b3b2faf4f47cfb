"""
gmgn wallet statistics client: secondary, scalar-only PNL provider.
"""

from typing import Any, Dict, Optional

import requests

from .errors import MalformedResponseError, UpstreamUnavailableError


GMGN_WALLET_STAT_URL = "https://gmgn.ai/defi/quotation/v1/wallet_stat/sol"

# Profit fields checked in priority order
PROFIT_FIELDS = ("realized_profit", "total_profit", "pnl")

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}
DEFAULT_TIMEOUT = 10.0  # seconds


def extract_realized_profit(payload: Dict[str, Any]) -> float:
    """
    Pick the profit figure out of a wallet_stat payload.

    The stats may be wrapped in a "data" object, which is used whenever
    present, even if empty. The first profit field present wins; numeric
    strings are parsed and anything unparseable counts as 0.

    Examples:
        extract_realized_profit({"data": {"realized_profit": 12.5}}) -> 12.5
        extract_realized_profit({"total_profit": "-3.25"}) -> -3.25
        extract_realized_profit({}) -> 0.0
    """
    data = payload["data"] if payload.get("data") is not None else payload
    if not isinstance(data, dict):
        return 0.0

    value: Any = None
    for name in PROFIT_FIELDS:
        if data.get(name) is not None:
            value = data[name]
            break

    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class GmgnClient:
    """Fetches a pre-aggregated realized profit figure for a wallet."""

    def __init__(
        self,
        base_url: str = GMGN_WALLET_STAT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_realized_profit(self, wallet: str) -> float:
        """
        Get the wallet's realized profit in USD.

        Args:
            wallet: Solana wallet public key (base58)

        Returns:
            Realized profit in USD (0 if the payload carries no profit field)

        Raises:
            UpstreamUnavailableError: On non-success status or network failure
            MalformedResponseError: If the body is not a JSON object
        """
        url = f"{self.base_url}/{wallet}"
        try:
            response = self.session.get(url, headers=DEFAULT_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamUnavailableError(f"Request failed: {e}") from e

        if not response.ok:
            raise UpstreamUnavailableError(
                f"gmgn API returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError("gmgn response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        return extract_realized_profit(payload)
