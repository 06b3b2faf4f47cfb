"""
US tax rates and the flat-rate tax calculation.

Rates are simplified effective rates for capital gains, for informational
purposes only.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import TaxBreakdown


# Fixed effective federal rate for capital gains
FEDERAL_TAX_RATE = 0.30

FILING_STATUS_OPTIONS: Dict[str, str] = {
    "single": "Single",
    "mfj": "Married Filing Jointly",
    "mfs": "Married Filing Separately",
    "hoh": "Head of Household",
}


@dataclass(frozen=True)
class StateInfo:
    name: str
    abbreviation: str
    tax_rate: float  # Effective state income tax rate as decimal


US_STATES: List[StateInfo] = [
    StateInfo("Alabama", "AL", 0.05),
    StateInfo("Alaska", "AK", 0.0),
    StateInfo("Arizona", "AZ", 0.025),
    StateInfo("Arkansas", "AR", 0.044),
    StateInfo("California", "CA", 0.133),
    StateInfo("Colorado", "CO", 0.044),
    StateInfo("Connecticut", "CT", 0.0699),
    StateInfo("Delaware", "DE", 0.066),
    StateInfo("Florida", "FL", 0.0),
    StateInfo("Georgia", "GA", 0.0549),
    StateInfo("Hawaii", "HI", 0.11),
    StateInfo("Idaho", "ID", 0.058),
    StateInfo("Illinois", "IL", 0.0495),
    StateInfo("Indiana", "IN", 0.0315),
    StateInfo("Iowa", "IA", 0.06),
    StateInfo("Kansas", "KS", 0.057),
    StateInfo("Kentucky", "KY", 0.04),
    StateInfo("Louisiana", "LA", 0.0425),
    StateInfo("Maine", "ME", 0.0715),
    StateInfo("Maryland", "MD", 0.0575),
    StateInfo("Massachusetts", "MA", 0.09),
    StateInfo("Michigan", "MI", 0.0425),
    StateInfo("Minnesota", "MN", 0.0985),
    StateInfo("Mississippi", "MS", 0.05),
    StateInfo("Missouri", "MO", 0.0495),
    StateInfo("Montana", "MT", 0.0675),
    StateInfo("Nebraska", "NE", 0.0584),
    StateInfo("Nevada", "NV", 0.0),
    StateInfo("New Hampshire", "NH", 0.04),
    StateInfo("New Jersey", "NJ", 0.1075),
    StateInfo("New Mexico", "NM", 0.059),
    StateInfo("New York", "NY", 0.109),
    StateInfo("North Carolina", "NC", 0.0475),
    StateInfo("North Dakota", "ND", 0.029),
    StateInfo("Ohio", "OH", 0.04),
    StateInfo("Oklahoma", "OK", 0.0475),
    StateInfo("Oregon", "OR", 0.099),
    StateInfo("Pennsylvania", "PA", 0.0307),
    StateInfo("Rhode Island", "RI", 0.0599),
    StateInfo("South Carolina", "SC", 0.064),
    StateInfo("South Dakota", "SD", 0.0),
    StateInfo("Tennessee", "TN", 0.0),
    StateInfo("Texas", "TX", 0.0),
    StateInfo("Utah", "UT", 0.0485),
    StateInfo("Vermont", "VT", 0.0875),
    StateInfo("Virginia", "VA", 0.0575),
    StateInfo("Washington", "WA", 0.07),
    StateInfo("West Virginia", "WV", 0.055),
    StateInfo("Wisconsin", "WI", 0.0765),
    StateInfo("Wyoming", "WY", 0.0),
    StateInfo("District of Columbia", "DC", 0.1075),
]

_STATES_BY_ABBREVIATION = {state.abbreviation: state for state in US_STATES}


def get_state_by_abbreviation(abbreviation: str) -> Optional[StateInfo]:
    """Look up a state by its two-letter code (e.g. "CA"); None if unknown."""
    return _STATES_BY_ABBREVIATION.get(abbreviation)


def calculate_tax(pnl: float, state_abbreviation: str) -> TaxBreakdown:
    """
    Apply the federal and state flat rates to a PNL figure.

    A zero or negative PNL owes no tax and is flagged as a loss.

    Args:
        pnl: Realized PNL in USD
        state_abbreviation: Two-letter state code

    Returns:
        TaxBreakdown with per-jurisdiction and total tax

    Raises:
        ValueError: If the state code is unknown
    """
    state = get_state_by_abbreviation(state_abbreviation)
    if state is None:
        raise ValueError(f"Invalid state: {state_abbreviation}")

    if pnl <= 0:
        return TaxBreakdown(
            total_pnl=pnl,
            federal_tax=0.0,
            state_tax=0.0,
            total_tax=0.0,
            federal_rate=FEDERAL_TAX_RATE,
            state_rate=state.tax_rate,
            is_loss=True,
        )

    federal_tax = pnl * FEDERAL_TAX_RATE
    state_tax = pnl * state.tax_rate

    return TaxBreakdown(
        total_pnl=pnl,
        federal_tax=federal_tax,
        state_tax=state_tax,
        total_tax=federal_tax + state_tax,
        federal_rate=FEDERAL_TAX_RATE,
        state_rate=state.tax_rate,
        is_loss=False,
    )
