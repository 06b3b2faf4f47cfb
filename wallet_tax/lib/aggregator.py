"""
PNL aggregation: folds parsed swaps into realized SOL and USD totals.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from .config import WalletTaxSettings
from .helius_client import HeliusClient
from .models import PnlResult, PnlSource, Transaction
from .price_oracle import CoinGeckoPriceOracle
from .swap_parser import (
    DEFAULT_SOL_DUST_THRESHOLD,
    DEFAULT_STABLECOIN_DUST_THRESHOLD,
    SWAP_TYPE,
    parse_swap_transaction,
)


logger = logging.getLogger(__name__)


@dataclass
class SwapTotals:
    """Running totals over a wallet's swaps."""

    total_sol_spent: float = 0.0
    total_sol_received: float = 0.0
    net_stablecoin_change: float = 0.0
    trade_count: int = 0

    @property
    def pnl_sol(self) -> float:
        return self.total_sol_received - self.total_sol_spent

    def pnl_usd(self, sol_price: float) -> float:
        return self.pnl_sol * sol_price + self.net_stablecoin_change

    def to_pnl_result(self, sol_price: float) -> PnlResult:
        return PnlResult(
            pnl_usd=self.pnl_usd(sol_price),
            source=PnlSource.PRIMARY,
            pnl_sol=self.pnl_sol,
            total_buy_sol=self.total_sol_spent,
            total_sell_sol=self.total_sol_received,
            trade_count=self.trade_count,
        )


def aggregate_swaps(
    transactions: Iterable[Transaction],
    wallet_address: str,
    sol_threshold: float = DEFAULT_SOL_DUST_THRESHOLD,
    stablecoin_threshold: float = DEFAULT_STABLECOIN_DUST_THRESHOLD,
) -> SwapTotals:
    """
    Sum SOL spent/received and stablecoin change over all swaps.

    Args:
        transactions: Transactions in any order
        wallet_address: Wallet whose balance changes are measured
        sol_threshold: Dust threshold for SOL changes
        stablecoin_threshold: Dust threshold for stablecoin changes

    Returns:
        SwapTotals; dust and non-swap transactions do not contribute
    """
    totals = SwapTotals()

    for tx in transactions:
        if tx.type != SWAP_TYPE:
            continue

        result = parse_swap_transaction(tx, wallet_address, sol_threshold, stablecoin_threshold)
        if result is None:
            continue

        totals.trade_count += 1
        if result.sol_change < 0:
            totals.total_sol_spent += -result.sol_change
        elif result.sol_change > 0:
            totals.total_sol_received += result.sol_change
        totals.net_stablecoin_change += result.usdc_change

    return totals


def aggregate_pnl(
    transactions: Iterable[Transaction],
    wallet_address: str,
    sol_price: float,
    sol_threshold: float = DEFAULT_SOL_DUST_THRESHOLD,
    stablecoin_threshold: float = DEFAULT_STABLECOIN_DUST_THRESHOLD,
) -> PnlResult:
    """Aggregate swaps and price the SOL PNL in USD."""
    totals = aggregate_swaps(transactions, wallet_address, sol_threshold, stablecoin_threshold)
    return totals.to_pnl_result(sol_price)


def calculate_wallet_pnl(
    client: HeliusClient,
    price_oracle: CoinGeckoPriceOracle,
    wallet_address: str,
    settings: WalletTaxSettings,
) -> PnlResult:
    """
    Run the full primary pipeline: fetch, parse, aggregate and price.

    Raises:
        ConfigurationError: If the Helius API key is not configured
        MalformedResponseError: If Helius returns an unexpected payload
    """
    logger.info("Calculating PNL for wallet: %s", wallet_address)

    transactions = client.get_wallet_transactions(wallet_address, settings.max_transactions)
    swap_count = sum(1 for tx in transactions if tx.type == SWAP_TYPE)
    logger.info("Fetched %d transactions, %d swaps", len(transactions), swap_count)

    totals = aggregate_swaps(
        transactions,
        wallet_address,
        settings.sol_dust_threshold,
        settings.stablecoin_dust_threshold,
    )
    sol_price = price_oracle.get_sol_price()
    result = totals.to_pnl_result(sol_price)

    logger.info(
        "SOL price $%.2f, spent %.4f SOL, received %.4f SOL, stablecoin change %.2f",
        sol_price,
        totals.total_sol_spent,
        totals.total_sol_received,
        totals.net_stablecoin_change,
    )
    logger.info(
        "PNL: %.4f SOL ($%.2f) over %d trades", result.pnl_sol, result.pnl_usd, result.trade_count
    )

    return result
