"""
Provider fallback chain for wallet PNL.

Tiers are tried strictly in order, first success wins:

    +-----------+---------------------------+-----------+-----------+
    | tier      | handler                   | extended? | on error  |
    +-----------+---------------------------+-----------+-----------+
    | PRIMARY   | Helius + CoinGecko        | yes       | SECONDARY |
    | SECONDARY | gmgn wallet_stat          | no        | DEMO      |
    | DEMO      | address hash              | yes       | (never)   |
    +-----------+---------------------------+-----------+-----------+

The scalar query walks every tier. The extended query skips tiers that
cannot fill the extended fields, so it goes PRIMARY -> DEMO.
"""

import logging
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from .address import is_valid_solana_address
from .aggregator import calculate_wallet_pnl
from .config import WalletTaxSettings, get_settings
from .demo import get_demo_pnl
from .errors import InvalidAddressError, ProviderError
from .gmgn_client import GmgnClient
from .helius_client import HeliusClient
from .models import PnlResult, PnlSource
from .price_oracle import CoinGeckoPriceOracle


logger = logging.getLogger(__name__)


class Tier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DEMO = "demo"


FIRST_TIER = Tier.PRIMARY

NEXT_TIER: Dict[Tier, Optional[Tier]] = {
    Tier.PRIMARY: Tier.SECONDARY,
    Tier.SECONDARY: Tier.DEMO,
    Tier.DEMO: None,
}

# Tiers able to populate pnl_sol, totals and trade_count
EXTENDED_TIERS: FrozenSet[Tier] = frozenset({Tier.PRIMARY, Tier.DEMO})


class PnlResolver:
    """
    Resolves a wallet's PNL through the tiered provider chain.

    Collaborators are injected so each tier can be exercised in isolation
    with fakes; any that are omitted are built from the settings.
    """

    def __init__(
        self,
        settings: Optional[WalletTaxSettings] = None,
        helius_client: Optional[HeliusClient] = None,
        gmgn_client: Optional[GmgnClient] = None,
        price_oracle: Optional[CoinGeckoPriceOracle] = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.helius_client = helius_client or HeliusClient(
            self.settings.helius_api_key, timeout=self.settings.request_timeout
        )
        self.gmgn_client = gmgn_client or GmgnClient(timeout=self.settings.request_timeout)
        self.price_oracle = price_oracle or CoinGeckoPriceOracle(
            fallback_price=self.settings.fallback_sol_price,
            max_age=self.settings.price_max_age_seconds,
            timeout=self.settings.request_timeout,
        )
        self.handlers: Dict[Tier, Callable[[str], PnlResult]] = {
            Tier.PRIMARY: self.resolve_primary,
            Tier.SECONDARY: self.resolve_secondary,
            Tier.DEMO: self.resolve_demo,
        }

    def resolve_primary(self, wallet: str) -> PnlResult:
        return calculate_wallet_pnl(self.helius_client, self.price_oracle, wallet, self.settings)

    def resolve_secondary(self, wallet: str) -> PnlResult:
        pnl_usd = self.gmgn_client.get_realized_profit(wallet)
        return PnlResult(pnl_usd=pnl_usd, source=PnlSource.SECONDARY)

    def resolve_demo(self, wallet: str) -> PnlResult:
        return get_demo_pnl(wallet, self.settings.demo_sol_price)

    def resolve(self, wallet: str, extended: bool) -> PnlResult:
        """
        Walk the tiers in order and return the first successful result.

        Args:
            wallet: Solana wallet public key (base58)
            extended: Only use tiers that can fill the extended fields

        Returns:
            PnlResult tagged with the tier that produced it

        Raises:
            InvalidAddressError: If the address fails syntax validation
        """
        if not is_valid_solana_address(wallet):
            raise InvalidAddressError(wallet)

        tier: Optional[Tier] = FIRST_TIER
        while tier is not None:
            if extended and tier not in EXTENDED_TIERS:
                tier = NEXT_TIER[tier]
                continue

            try:
                result = self.handlers[tier](wallet)
            except ProviderError as e:
                logger.warning("%s PNL provider failed: %s", tier.value, e)
                tier = NEXT_TIER[tier]
                continue

            logger.info("PNL resolved by %s tier: $%.2f", tier.value, result.pnl_usd)
            return result

        # DEMO is terminal and cannot fail
        raise AssertionError("fallback chain exhausted")

    def get_wallet_pnl(self, wallet: str) -> PnlResult:
        """Scalar PNL query: PRIMARY -> SECONDARY -> DEMO."""
        return self.resolve(wallet, extended=False)

    def get_wallet_pnl_extended(self, wallet: str) -> PnlResult:
        """Extended PNL query: PRIMARY -> DEMO."""
        return self.resolve(wallet, extended=True)


def get_wallet_pnl(wallet: str, resolver: Optional[PnlResolver] = None) -> PnlResult:
    return (resolver or PnlResolver()).get_wallet_pnl(wallet)


def get_wallet_pnl_extended(wallet: str, resolver: Optional[PnlResolver] = None) -> PnlResult:
    return (resolver or PnlResolver()).get_wallet_pnl_extended(wallet)
