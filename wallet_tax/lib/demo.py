"""
Deterministic demo PNL, used when no real provider can answer.

The figures are derived from a 32-bit rolling hash of the address. They
are stable per address and carry no meaning beyond display.
"""

from .models import PnlResult, PnlSource

DEFAULT_DEMO_SOL_PRICE = 100.0

MAX_INT32 = 2147483647
LOSS_SHARE = 0.3  # hashes below this fraction map to a loss
MAX_DEMO_LOSS = 50000.0
MAX_DEMO_GAIN = 200000.0


def address_hash(address: str) -> int:
    """
    Signed 32-bit rolling hash: h = h * 31 + ord(c), wrapped to int32.

    Examples:
        address_hash("") -> 0
        address_hash("a") -> 97
    """
    h = 0
    for char in address:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h > MAX_INT32:
        h -= 1 << 32
    return h


def normalized_hash(address: str) -> float:
    return abs(address_hash(address)) / MAX_INT32


def get_demo_pnl(address: str, sol_price: float = DEFAULT_DEMO_SOL_PRICE) -> PnlResult:
    """
    Build a deterministic pseudo-PNL for an address.

    About 30% of addresses get a loss, the rest a gain. The SOL totals
    are derived so that total_sell_sol - total_buy_sol == pnl_sol.
    """
    n = normalized_hash(address)

    if n < LOSS_SHARE:
        pnl_usd = -(n * MAX_DEMO_LOSS)
    else:
        pnl_usd = ((n - LOSS_SHARE) / (1 - LOSS_SHARE)) * MAX_DEMO_GAIN

    pnl_sol = pnl_usd / sol_price
    total_buy_sol = abs(pnl_sol) * 2

    return PnlResult(
        pnl_usd=pnl_usd,
        source=PnlSource.DEMO,
        pnl_sol=pnl_sol,
        total_buy_sol=total_buy_sol,
        total_sell_sol=total_buy_sol + pnl_sol,
        trade_count=int(n * 100) + 10,
    )
