"""
Helius API client with automatic rate limit handling and retry logic.

This module provides the transaction fetcher for the primary PNL provider,
handling cursor pagination over a wallet's enhanced transaction history
and 429/5xx retries.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from .errors import (
    ConfigurationError,
    MalformedResponseError,
    RateLimitError,
    UpstreamUnavailableError,
)
from .models import Transaction


logger = logging.getLogger(__name__)

HELIUS_BASE_URL = "https://api.helius.xyz"

# Records requested per page; a shorter page marks the end of history
BATCH_SIZE = 100

# Retry configuration
DEFAULT_INITIAL_DELAY = 1.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_MAX_DELAY = 8.0  # seconds
DEFAULT_JITTER = 0.1  # ±10%
DEFAULT_TIMEOUT = 10.0  # seconds


class HeliusClient:
    """
    Client for the Helius enhanced transactions API.

    All API interactions go through this class, which handles:
    - API key injection (and redaction from error messages)
    - HTTP 429 rate limit and 5xx retries with exponential backoff
    - Per-request timeouts
    - "before" cursor pagination
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = HELIUS_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_delay: float = DEFAULT_MAX_DELAY,
        jitter: float = DEFAULT_JITTER,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Helius client.

        A missing API key is accepted here and reported as a
        ConfigurationError on first use, so the client can be wired up
        before the credential is known to be absent.

        Args:
            api_key: Helius API key (may be None or empty)
            base_url: API root URL
            timeout: Per-request timeout in seconds
            initial_delay: Initial delay in seconds for retry backoff
            backoff_multiplier: Multiplier for exponential backoff
            max_retries: Maximum number of retry attempts
            max_delay: Maximum delay cap in seconds
            jitter: Jitter factor (±percentage) to randomize delays
            session: Optional requests.Session to reuse
        """
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.initial_delay = initial_delay
        self.backoff_multiplier = backoff_multiplier
        self.max_retries = max_retries
        self.max_delay = max_delay
        self.jitter = jitter
        self.session = session or requests.Session()

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("Helius API key not configured")
        return self.api_key

    def _sanitize_error_message(self, message: str) -> str:
        """Remove API key from error messages to prevent credential leakage."""
        if not self.api_key:
            return message
        return message.replace(self.api_key, "[REDACTED]")

    def _get_transactions_url(self, wallet: str) -> str:
        return f"{self.base_url}/v0/addresses/{wallet}/transactions"

    def _apply_jitter(self, delay: float) -> float:
        """Apply random jitter to a delay value."""
        jitter_range = delay * self.jitter
        return delay + random.uniform(-jitter_range, jitter_range)

    def _sleep_before_retry(self, delay: float) -> float:
        time.sleep(self._apply_jitter(min(delay, self.max_delay)))
        return delay * self.backoff_multiplier

    def _execute_with_retry(
        self,
        request_func: Callable[[], requests.Response],
    ) -> requests.Response:
        """
        Execute a request function with retry logic for rate limits and server errors.

        Args:
            request_func: A callable that returns a requests.Response

        Returns:
            The successful response

        Raises:
            UpstreamUnavailableError: For non-success statuses or network failures
            RateLimitError: When rate limit retries are exhausted
        """
        delay = self.initial_delay

        for attempt in range(self.max_retries + 1):
            try:
                response = request_func()
            except requests.RequestException as e:
                if attempt < self.max_retries:
                    delay = self._sleep_before_retry(delay)
                    continue
                sanitized_msg = self._sanitize_error_message(str(e))
                raise UpstreamUnavailableError(f"Request failed: {sanitized_msg}") from e

            if response.status_code == 429:
                if attempt < self.max_retries:
                    delay = self._sleep_before_retry(delay)
                    continue
                raise RateLimitError(
                    "Rate limit exceeded and max retries reached",
                    status_code=429,
                )

            if response.status_code >= 500:
                if attempt < self.max_retries:
                    delay = self._sleep_before_retry(delay)
                    continue
                raise UpstreamUnavailableError(
                    f"Server error: {response.status_code}",
                    status_code=response.status_code,
                )

            if response.status_code in (401, 403):
                raise UpstreamUnavailableError(
                    "Invalid API key", status_code=response.status_code
                )

            if not response.ok:
                raise UpstreamUnavailableError(
                    f"HTTP error: {response.status_code}",
                    status_code=response.status_code,
                )

            return response

        raise UpstreamUnavailableError("Max retries exceeded")

    def _fetch_batch(self, wallet: str, before: Optional[str]) -> List[Transaction]:
        """
        Fetch a single page of transactions.

        Raises:
            UpstreamUnavailableError: On non-success status or network failure
            MalformedResponseError: If the body is not a JSON list of transactions
        """
        params: Dict[str, Any] = {"api-key": self._require_api_key(), "limit": BATCH_SIZE}
        if before:
            params["before"] = before

        url = self._get_transactions_url(wallet)
        response = self._execute_with_retry(
            lambda: self.session.get(url, params=params, timeout=self.timeout)
        )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError("Transactions response is not valid JSON") from e

        if not isinstance(payload, list):
            raise MalformedResponseError(
                f"Expected a list of transactions, got {type(payload).__name__}"
            )

        return [Transaction.from_api(record) for record in payload]

    def get_wallet_transactions(self, wallet: str, limit: int = 1000) -> List[Transaction]:
        """
        Get up to `limit` of a wallet's most recent transactions.

        Pages backwards through history using the last signature of each
        batch as the exclusive "before" cursor. A non-success status or
        network failure ends pagination early and whatever was already
        fetched is returned.

        Args:
            wallet: Solana wallet public key (base58)
            limit: Maximum number of transactions to return

        Returns:
            List of Transaction objects, newest first

        Raises:
            ConfigurationError: If no API key is configured
            MalformedResponseError: If a page has an unexpected shape
        """
        self._require_api_key()

        all_transactions: List[Transaction] = []
        before: Optional[str] = None

        while len(all_transactions) < limit:
            try:
                batch = self._fetch_batch(wallet, before)
            except MalformedResponseError:
                raise
            except UpstreamUnavailableError as e:
                logger.warning(
                    "Helius transaction fetch stopped after %d records: %s",
                    len(all_transactions),
                    e,
                )
                break

            if not batch:
                break

            all_transactions.extend(batch)
            before = batch[-1].signature

            if len(batch) < BATCH_SIZE:
                break

        return all_transactions[:limit]
