"""
Data models for wallet PNL aggregation and tax reporting.

This module defines the transaction records parsed from the primary
provider, the per-swap and aggregate PNL results, and the TaxReport
used for CSV/JSON output.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedResponseError


# CSV column order for output
REPORT_COLUMNS = [
    "wallet_address",
    "filing_status",
    "state",
    "data_source",
    "total_pnl",
    "pnl_sol",
    "total_buy_sol",
    "total_sell_sol",
    "trade_count",
    "federal_rate",
    "state_rate",
    "federal_tax",
    "state_tax",
    "total_tax",
    "is_loss",
]


class PnlSource(str, Enum):
    """Provenance of a PNL figure: which fallback tier produced it."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    DEMO = "demo"


def _to_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise MalformedResponseError(f"Non-numeric {field_name}: {value!r}")
    try:
        number = float(value or 0)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedResponseError(f"Non-numeric {field_name}: {value!r}") from e
    if not math.isfinite(number):
        raise MalformedResponseError(f"Non-finite {field_name}: {value!r}")
    return number


def _to_int(value: Any, field_name: str) -> int:
    return int(_to_float(value, field_name))


def _to_str(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedResponseError(f"Expected string {field_name}, got {type(value).__name__}")
    return value


def _to_optional_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    return _to_str(value, field_name)


def _require_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected {what} object, got {type(data).__name__}")
    return data


def _to_list(value: Any, field_name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"Expected list {field_name}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class TokenTransfer:
    """A single token movement. Amount is already in decimal form."""

    mint: str
    token_amount: float
    from_user_account: Optional[str] = None
    to_user_account: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "TokenTransfer":
        data = _require_object(data, "token transfer")
        return cls(
            mint=_to_str(data.get("mint"), "mint"),
            token_amount=_to_float(data.get("tokenAmount"), "tokenAmount"),
            from_user_account=_to_optional_str(data.get("fromUserAccount"), "fromUserAccount"),
            to_user_account=_to_optional_str(data.get("toUserAccount"), "toUserAccount"),
        )


@dataclass(frozen=True)
class NativeTransfer:
    """A native SOL movement. Amount is in lamports."""

    amount: int
    from_user_account: Optional[str] = None
    to_user_account: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> "NativeTransfer":
        data = _require_object(data, "native transfer")
        return cls(
            amount=_to_int(data.get("amount"), "amount"),
            from_user_account=_to_optional_str(data.get("fromUserAccount"), "fromUserAccount"),
            to_user_account=_to_optional_str(data.get("toUserAccount"), "toUserAccount"),
        )


@dataclass(frozen=True)
class Transaction:
    """
    One ledger event from the enhanced transactions API.

    Only the "SWAP" type is consumed by the PNL aggregation; the
    remaining types are fetched but ignored.
    """

    signature: str
    timestamp: int
    type: str
    fee: int  # lamports
    fee_payer: str
    source: str = ""
    token_transfers: Tuple[TokenTransfer, ...] = ()
    native_transfers: Tuple[NativeTransfer, ...] = ()

    @classmethod
    def from_api(cls, data: Any) -> "Transaction":
        """
        Build a Transaction from a provider JSON record.

        Raises:
            MalformedResponseError: If the record or any nested transfer has an
                unexpected shape, or the signature is missing
        """
        data = _require_object(data, "transaction")

        signature = _to_str(data.get("signature"), "signature")
        if not signature:
            raise MalformedResponseError("Transaction record is missing a signature")

        return cls(
            signature=signature,
            timestamp=_to_int(data.get("timestamp"), "timestamp"),
            type=_to_str(data.get("type"), "type"),
            fee=_to_int(data.get("fee"), "fee"),
            fee_payer=_to_str(data.get("feePayer"), "feePayer"),
            source=_to_str(data.get("source"), "source"),
            token_transfers=tuple(
                TokenTransfer.from_api(t)
                for t in _to_list(data.get("tokenTransfers"), "tokenTransfers")
            ),
            native_transfers=tuple(
                NativeTransfer.from_api(n)
                for n in _to_list(data.get("nativeTransfers"), "nativeTransfers")
            ),
        )


@dataclass(frozen=True)
class SwapResult:
    """Net balance changes attributable to the wallet for one swap."""

    sol_change: float  # Negative = spent SOL, positive = received SOL
    usdc_change: float


@dataclass
class PnlResult:
    """
    Realized PNL for a wallet, tagged with the tier that produced it.

    Scalar results (secondary tier) only carry pnl_usd; the extended
    fields are None.
    """

    pnl_usd: float
    source: PnlSource
    pnl_sol: Optional[float] = None
    total_buy_sol: Optional[float] = None
    total_sell_sol: Optional[float] = None
    trade_count: Optional[int] = None

    @property
    def is_extended(self) -> bool:
        return self.pnl_sol is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase output contract."""
        return {
            "pnlUsd": self.pnl_usd,
            "pnlSol": self.pnl_sol,
            "totalBuySol": self.total_buy_sol,
            "totalSellSol": self.total_sell_sol,
            "tradeCount": self.trade_count,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class TaxBreakdown:
    """Flat-rate federal and state tax owed on a PNL figure."""

    total_pnl: float
    federal_tax: float
    state_tax: float
    total_tax: float
    federal_rate: float
    state_rate: float
    is_loss: bool


@dataclass
class TaxReport:
    """Tax estimate for one wallet, ready for CSV or JSON output."""

    wallet_address: str
    filing_status: str
    state: str
    pnl: PnlResult
    tax: TaxBreakdown

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict (camelCase keys)."""
        return {
            "walletAddress": self.wallet_address,
            "filingStatus": self.filing_status,
            "state": self.state,
            "totalPnl": self.tax.total_pnl,
            "pnlSol": self.pnl.pnl_sol,
            "totalBuySol": self.pnl.total_buy_sol,
            "totalSellSol": self.pnl.total_sell_sol,
            "tradeCount": self.pnl.trade_count,
            "federalTax": self.tax.federal_tax,
            "stateTax": self.tax.state_tax,
            "totalTax": self.tax.total_tax,
            "federalRate": self.tax.federal_rate,
            "stateRate": self.tax.state_rate,
            "isLoss": self.tax.is_loss,
            "dataSource": self.pnl.source.value,
        }

    def to_csv_row(self) -> List[str]:
        """Convert report to a CSV row (list of strings)."""
        return [
            self.wallet_address,
            self.filing_status,
            self.state,
            self.pnl.source.value,
            f"{self.tax.total_pnl:.2f}",
            _format_optional(self.pnl.pnl_sol),
            _format_optional(self.pnl.total_buy_sol),
            _format_optional(self.pnl.total_sell_sol),
            "" if self.pnl.trade_count is None else str(self.pnl.trade_count),
            str(self.tax.federal_rate),
            str(self.tax.state_rate),
            f"{self.tax.federal_tax:.2f}",
            f"{self.tax.state_tax:.2f}",
            f"{self.tax.total_tax:.2f}",
            "true" if self.tax.is_loss else "false",
        ]


def _format_optional(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.4f}"
