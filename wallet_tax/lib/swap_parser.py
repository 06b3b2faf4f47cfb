"""
Swap parsing: per-transaction SOL and stablecoin deltas for one wallet.
"""

from typing import Optional

from .models import SwapResult, Transaction

# Wrapped SOL mint address (native SOL as an SPL token)
WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"

# Stablecoins treated as USD
STABLECOIN_MINTS = frozenset(
    {
        "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",  # USDC
        "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",  # USDT
    }
)

LAMPORTS_PER_SOL = 1_000_000_000

SWAP_TYPE = "SWAP"

DEFAULT_SOL_DUST_THRESHOLD = 0.00001
DEFAULT_STABLECOIN_DUST_THRESHOLD = 0.01


def lamports_to_sol(lamports: float) -> float:
    return lamports / LAMPORTS_PER_SOL


def _signed_amount(
    amount: float, wallet: str, from_account: Optional[str], to_account: Optional[str]
) -> float:
    """Amount as seen by the wallet: negative if sent, positive if received."""
    change = 0.0
    if from_account and from_account.lower() == wallet:
        change -= amount
    if to_account and to_account.lower() == wallet:
        change += amount
    return change


def parse_swap_transaction(
    tx: Transaction,
    wallet_address: str,
    sol_threshold: float = DEFAULT_SOL_DUST_THRESHOLD,
    stablecoin_threshold: float = DEFAULT_STABLECOIN_DUST_THRESHOLD,
) -> Optional[SwapResult]:
    """
    Compute the wallet's net SOL and stablecoin change for a swap.

    Wrapped SOL token transfers and native transfers both count towards
    the SOL change; the transaction fee is charged when the wallet paid it.
    Changes below both dust thresholds are treated as noise.

    Args:
        tx: Transaction to parse
        wallet_address: Wallet whose balance changes are measured
        sol_threshold: Minimum absolute SOL change to count as a trade
        stablecoin_threshold: Minimum absolute stablecoin change to count as a trade

    Returns:
        SwapResult, or None if the transaction is not a swap or is dust
    """
    if tx.type != SWAP_TYPE:
        return None

    wallet = wallet_address.lower()
    sol_change = 0.0
    usdc_change = 0.0

    for transfer in tx.token_transfers:
        change = _signed_amount(
            transfer.token_amount, wallet, transfer.from_user_account, transfer.to_user_account
        )
        if transfer.mint == WRAPPED_SOL_MINT:
            sol_change += change
        if transfer.mint in STABLECOIN_MINTS:
            usdc_change += change

    for transfer in tx.native_transfers:
        sol_change += _signed_amount(
            lamports_to_sol(transfer.amount),
            wallet,
            transfer.from_user_account,
            transfer.to_user_account,
        )

    if tx.fee_payer.lower() == wallet:
        sol_change -= lamports_to_sol(tx.fee)

    if abs(sol_change) < sol_threshold and abs(usdc_change) < stablecoin_threshold:
        return None

    return SwapResult(sol_change=sol_change, usdc_change=usdc_change)
