"""
Unit tests for the Helius API client.

Tests follow the Given/When/Then pattern for clarity.
"""

from urllib.parse import parse_qs, urlparse

import pytest
import requests
import responses

from wallet_tax.lib.errors import (
    ConfigurationError,
    MalformedResponseError,
    RateLimitError,
    UpstreamUnavailableError,
)
from wallet_tax.lib.helius_client import BATCH_SIZE, HeliusClient
from wallet_tax.lib.models import Transaction


def make_batch(prefix, count):
    """Build a page of minimal transaction records."""
    return [{"signature": f"{prefix}-{i}", "type": "SWAP", "fee": 5000} for i in range(count)]


def query_of(call):
    return parse_qs(urlparse(call.request.url).query)


@pytest.fixture
def transactions_url(sample_solana_address):
    return f"https://api.helius.xyz/v0/addresses/{sample_solana_address}/transactions"


def fast_client(api_key, **kwargs):
    """Client with negligible retry delays."""
    return HeliusClient(api_key, initial_delay=0.001, jitter=0, **kwargs)


class TestHeliusClientConfiguration:
    """Tests for credential handling."""

    def test_raises_configuration_error_without_api_key(self, sample_solana_address):
        """
        Given a HeliusClient constructed without an API key
        When fetching wallet transactions
        Then ConfigurationError should be raised before any request
        """
        # Given
        client = HeliusClient(None)

        # When / Then
        with pytest.raises(ConfigurationError, match="not configured"):
            client.get_wallet_transactions(sample_solana_address)

    def test_empty_api_key_is_treated_as_missing(self, sample_solana_address):
        """
        Given a HeliusClient with an empty API key
        When fetching wallet transactions
        Then ConfigurationError should be raised
        """
        # Given
        client = HeliusClient("")

        # When / Then
        with pytest.raises(ConfigurationError):
            client.get_wallet_transactions(sample_solana_address)

    def test_sanitize_error_message_redacts_api_key(self, mock_helius_api_key):
        """
        Given an error message containing the API key
        When sanitizing it
        Then the key should be redacted
        """
        # Given
        client = HeliusClient(mock_helius_api_key)

        # When
        message = client._sanitize_error_message(f"GET ...?api-key={mock_helius_api_key} failed")

        # Then
        assert mock_helius_api_key not in message
        assert "[REDACTED]" in message

    def test_jitter_applies_randomization_to_delay(self, mock_helius_api_key):
        """
        Given a HeliusClient with jitter enabled
        When calculating delay with jitter
        Then the delay should be within the expected range
        """
        # Given
        client = HeliusClient(mock_helius_api_key, jitter=0.1)

        # When
        jittered_delays = [client._apply_jitter(1.0) for _ in range(100)]

        # Then
        for delay in jittered_delays:
            assert 0.9 <= delay <= 1.1


class TestGetWalletTransactionsPagination:
    """Tests for cursor pagination."""

    @responses.activate
    def test_stops_after_short_batch(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider returning batches of 100, 100 and 47 records
        When fetching up to 1000 transactions
        Then exactly 3 requests should be made and 247 records returned
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(responses.GET, transactions_url, json=make_batch("b", 100), status=200)
        responses.add(responses.GET, transactions_url, json=make_batch("c", 47), status=200)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address, limit=1000)

        # Then
        assert len(responses.calls) == 3
        assert len(transactions) == 247
        assert all(isinstance(tx, Transaction) for tx in transactions)
        assert transactions[0].signature == "a-0"
        assert transactions[-1].signature == "c-46"

    @responses.activate
    def test_passes_last_signature_as_before_cursor(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider returning two pages
        When fetching wallet transactions
        Then the second request should use the first page's last signature as cursor
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(responses.GET, transactions_url, json=make_batch("b", 3), status=200)

        # When
        client.get_wallet_transactions(sample_solana_address)

        # Then
        first, second = query_of(responses.calls[0]), query_of(responses.calls[1])
        assert "before" not in first
        assert first["limit"] == [str(BATCH_SIZE)]
        assert first["api-key"] == [mock_helius_api_key]
        assert second["before"] == ["a-99"]

    @responses.activate
    def test_stops_on_empty_batch(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider whose second page is empty
        When fetching wallet transactions
        Then pagination should stop with the first page's records
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(responses.GET, transactions_url, json=[], status=200)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address)

        # Then
        assert len(transactions) == 100
        assert len(responses.calls) == 2

    @responses.activate
    def test_never_returns_more_than_limit(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider with more history than requested
        When fetching with a limit of 150
        Then two pages should be fetched and the result truncated to 150
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(responses.GET, transactions_url, json=make_batch("b", 100), status=200)
        responses.add(responses.GET, transactions_url, json=make_batch("c", 100), status=200)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address, limit=150)

        # Then
        assert len(transactions) == 150
        assert len(responses.calls) == 2


class TestGetWalletTransactionsErrors:
    """Tests for soft and hard failures while paginating."""

    @responses.activate
    def test_returns_accumulated_records_on_http_error(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider that fails with 400 on the second page
        When fetching wallet transactions
        Then the first page should be returned without raising
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(responses.GET, transactions_url, json={"error": "bad"}, status=400)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address)

        # Then
        assert len(transactions) == 100

    @responses.activate
    def test_returns_empty_list_when_first_page_fails(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider rejecting the API key
        When fetching wallet transactions
        Then an empty list should be returned
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json={"error": "unauthorized"}, status=401)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address)

        # Then
        assert transactions == []
        assert len(responses.calls) == 1

    @responses.activate
    def test_returns_accumulated_records_on_network_error(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider whose connection fails on every retry of the second page
        When fetching wallet transactions
        Then the first page should be returned
        """
        # Given
        client = fast_client(mock_helius_api_key, max_retries=1)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 100), status=200)
        responses.add(
            responses.GET, transactions_url, body=requests.ConnectionError("connection reset")
        )
        responses.add(
            responses.GET, transactions_url, body=requests.ConnectionError("connection reset")
        )

        # When
        transactions = client.get_wallet_transactions(sample_solana_address)

        # Then
        assert len(transactions) == 100
        assert len(responses.calls) == 3

    @responses.activate
    def test_raises_for_non_list_payload(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider returning a JSON object instead of a list
        When fetching wallet transactions
        Then MalformedResponseError should be raised
        """
        # Given
        client = HeliusClient(mock_helius_api_key)
        responses.add(responses.GET, transactions_url, json={"transactions": []}, status=200)

        # When / Then
        with pytest.raises(MalformedResponseError):
            client.get_wallet_transactions(sample_solana_address)


class TestRetryHandling:
    """Tests for 429 and 5xx retry behavior."""

    @responses.activate
    def test_retries_on_429_then_succeeds(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider that rate limits once
        When fetching wallet transactions
        Then the client should retry and return the records
        """
        # Given
        client = fast_client(mock_helius_api_key, max_retries=2)
        responses.add(responses.GET, transactions_url, status=429)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 5), status=200)

        # When
        transactions = client.get_wallet_transactions(sample_solana_address)

        # Then
        assert len(transactions) == 5
        assert len(responses.calls) == 2

    @responses.activate
    def test_raises_rate_limit_error_after_max_retries(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider that keeps rate limiting
        When fetching a single batch
        Then RateLimitError should be raised after the retries
        """
        # Given
        client = fast_client(mock_helius_api_key, max_retries=2)
        for _ in range(3):
            responses.add(responses.GET, transactions_url, status=429)

        # When / Then
        with pytest.raises(RateLimitError) as exc_info:
            client._fetch_batch(sample_solana_address, None)

        assert exc_info.value.status_code == 429
        assert len(responses.calls) == 3  # Initial + 2 retries

    @responses.activate
    def test_retries_on_server_error(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider that returns 503 once
        When fetching a single batch
        Then the client should retry with backoff
        """
        # Given
        client = fast_client(mock_helius_api_key, max_retries=2)
        responses.add(responses.GET, transactions_url, status=503)
        responses.add(responses.GET, transactions_url, json=make_batch("a", 2), status=200)

        # When
        batch = client._fetch_batch(sample_solana_address, None)

        # Then
        assert [tx.signature for tx in batch] == ["a-0", "a-1"]
        assert len(responses.calls) == 2

    @responses.activate
    def test_does_not_retry_client_errors(
        self, mock_helius_api_key, sample_solana_address, transactions_url
    ):
        """
        Given a provider returning 404
        When fetching a single batch
        Then UpstreamUnavailableError should be raised without retrying
        """
        # Given
        client = fast_client(mock_helius_api_key, max_retries=3)
        responses.add(responses.GET, transactions_url, status=404)

        # When / Then
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            client._fetch_batch(sample_solana_address, None)

        assert exc_info.value.status_code == 404
        assert len(responses.calls) == 1
