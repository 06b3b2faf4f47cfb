#!/usr/bin/env python3
"""
Estimate US federal and state tax on a Solana wallet's realized trading PNL.

This script resolves the wallet's realized PNL through the provider
fallback chain (Helius, then a deterministic demo estimate), applies
flat-rate federal and state tax, and writes a JSON or CSV report.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from wallet_tax.lib.address import is_valid_solana_address
from wallet_tax.lib.config import WalletTaxSettings
from wallet_tax.lib.fallback import PnlResolver
from wallet_tax.lib.formatters import OUTPUT_FORMATS, format_summary, write_report
from wallet_tax.lib.models import TaxReport
from wallet_tax.lib.tax_rates import (
    FILING_STATUS_OPTIONS,
    calculate_tax,
    get_state_by_abbreviation,
)


logger = logging.getLogger(__name__)

PNL_FETCH_ERROR_MESSAGE = (
    "Unable to fetch wallet PNL. Please verify the wallet address and try again."
)
SERVER_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class RequestValidationError(ValueError):
    """Raised when a tax request fails input validation."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def positive_int(value: str) -> int:
    """Argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def log(tag: str, message: str) -> None:
    """Log a message with a tag prefix."""
    print(f"[{tag}] {message}", file=sys.stderr)


def validate_request(wallet: str, filing_status: str, state: str) -> str:
    """
    Validate a tax request.

    Args:
        wallet: Wallet address (surrounding whitespace is ignored)
        filing_status: One of single, mfj, mfs, hoh
        state: Two-letter state code

    Returns:
        The trimmed wallet address

    Raises:
        RequestValidationError: With INVALID_INPUT, INVALID_WALLET,
            INVALID_STATE or INVALID_STATUS
    """
    if not wallet or not wallet.strip():
        raise RequestValidationError("INVALID_INPUT", "Wallet address is required")

    trimmed = wallet.strip()
    if not is_valid_solana_address(trimmed):
        raise RequestValidationError("INVALID_WALLET", "Invalid Solana wallet address format")

    if not state or get_state_by_abbreviation(state) is None:
        raise RequestValidationError("INVALID_STATE", "Please select a valid US state")

    if filing_status not in FILING_STATUS_OPTIONS:
        raise RequestValidationError("INVALID_STATUS", "Please select a valid filing status")

    return trimmed


def build_report(
    resolver: PnlResolver, wallet: str, filing_status: str, state: str
) -> TaxReport:
    """Resolve extended PNL for a validated request and calculate tax on it."""
    pnl = resolver.get_wallet_pnl_extended(wallet)
    tax = calculate_tax(pnl.pnl_usd, state)
    return TaxReport(
        wallet_address=wallet,
        filing_status=filing_status,
        state=state,
        pnl=pnl,
        tax=tax,
    )


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        description="Estimate tax owed on a Solana wallet's realized trading PNL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print a JSON report to stdout (API key from HELIUS_API_KEY)
  %(prog)s --wallet GKvq... --filing-status single --state CA

  # Save a CSV report
  %(prog)s --api-key YOUR_KEY --wallet GKvq... --filing-status mfj \\
    --state NY --format csv --output tax_report.csv
        """,
    )

    parser.add_argument(
        "--wallet",
        required=True,
        help="Solana wallet address to analyze",
    )
    parser.add_argument(
        "--filing-status",
        required=True,
        help=f"Filing status. Supported: {', '.join(FILING_STATUS_OPTIONS)}",
    )
    parser.add_argument(
        "--state",
        required=True,
        help="Two-letter US state code (e.g. CA, NY, DC)",
    )
    parser.add_argument(
        "--api-key",
        help="Helius API key (defaults to HELIUS_API_KEY)",
    )
    parser.add_argument(
        "--max-transactions",
        type=positive_int,
        help="Maximum number of transactions to fetch (default 1000)",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="Report format (default json)",
    )
    parser.add_argument(
        "--output",
        help="Output file path (timestamp auto-appended). If not specified, outputs to stdout.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log provider activity",
    )

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed_args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        wallet = validate_request(parsed_args.wallet, parsed_args.filing_status, parsed_args.state)
    except RequestValidationError as e:
        print(f"Error: {e.code}: {e}", file=sys.stderr)
        return 1

    overrides = {}
    if parsed_args.api_key is not None:
        overrides["helius_api_key"] = parsed_args.api_key
    if parsed_args.max_transactions is not None:
        overrides["max_transactions"] = parsed_args.max_transactions
    try:
        settings = WalletTaxSettings(**overrides)
    except ValidationError as e:
        print(f"Error: INVALID_CONFIG: {e}", file=sys.stderr)
        return 1

    log("pnl", f"Resolving realized PNL for {wallet}...")
    try:
        resolver = PnlResolver(settings)
        report = build_report(resolver, wallet, parsed_args.filing_status, parsed_args.state)
    except Exception:
        logger.info("PNL fetch failed for %s", wallet, exc_info=True)
        print(f"Error: PNL_FETCH_ERROR: {PNL_FETCH_ERROR_MESSAGE}", file=sys.stderr)
        return 1

    try:
        output_file = write_report(report, parsed_args.output, parsed_args.format)
    except Exception:
        logger.info("Writing report failed", exc_info=True)
        print(f"Error: SERVER_ERROR: {SERVER_ERROR_MESSAGE}", file=sys.stderr)
        return 1

    print(format_summary(report), file=sys.stderr)
    if output_file:
        print(f"\nReport written to: {output_file}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
