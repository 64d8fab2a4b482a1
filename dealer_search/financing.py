"""
Monthly payment estimates for financing or leasing a vehicle.
"""

import math
from typing import Tuple

from dealer_search.models import AffordabilityRequest, AffordabilityResult

DEFAULT_DOWN_PAYMENT_RATIO = 0.10
DEFAULT_FINANCE_TERM = 60
DEFAULT_LEASE_TERM = 36
LEASE_RESIDUAL_RATIO = 0.57
LEASE_ACQUISITION_FEE = 650

# (minimum credit score, APR)
LEASE_RATES: Tuple[Tuple[int, float], ...] = (
    (750, 5.5),
    (700, 6.5),
    (650, 8.0),
    (600, 10.5),
    (0, 13.5),
)

# (minimum credit score, (APR for <=48 months, <=60 months, longer))
FINANCE_RATES: Tuple[Tuple[int, Tuple[float, float, float]], ...] = (
    (750, (5.0, 5.5, 6.0)),
    (700, (6.0, 6.5, 7.0)),
    (650, (7.5, 8.5, 9.5)),
    (600, (10.0, 11.5, 13.0)),
    (0, (13.5, 15.0, 16.5)),
)

CREDIT_CATEGORIES: Tuple[Tuple[int, str], ...] = (
    (750, "Excellent"),
    (700, "Very Good"),
    (650, "Good"),
    (600, "Fair"),
    (0, "Poor"),
)


def _round_dollars(amount: float) -> int:
    # half up, not banker's rounding
    return math.floor(amount + 0.5)


def credit_category(credit_score: int) -> str:
    return next(label for floor, label in CREDIT_CATEGORIES if credit_score >= floor)


def interest_rate_for(credit_score: int, term_months: int, lease: bool) -> float:
    """
    Annual percentage rate for a credit score and term.

    Lease rates depend only on the score. Finance rates also step up for
    terms over 48 and over 60 months.
    """
    if lease:
        return next(rate for floor, rate in LEASE_RATES if credit_score >= floor)

    rates = next(rates for floor, rates in FINANCE_RATES if credit_score >= floor)
    if term_months <= 48:
        return rates[0]
    if term_months <= 60:
        return rates[1]
    return rates[2]


def amortized_payment(principal: float, annual_rate: float, term_months: int) -> float:
    monthly_rate = annual_rate / 100 / 12
    if monthly_rate == 0:
        return principal / term_months
    growth = (1 + monthly_rate) ** term_months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_affordability(request: AffordabilityRequest) -> AffordabilityResult:
    """
    Estimate the monthly payment for a finance or lease deal.

    Args:
        request: Price, down payment, credit score, loan type and term

    Returns:
        Payment breakdown with amounts rounded to whole dollars
    """
    is_lease = request.loan_type == "lease"
    price = request.price
    down = request.down_payment if request.down_payment is not None else price * DEFAULT_DOWN_PAYMENT_RATIO
    term = request.loan_term or (DEFAULT_LEASE_TERM if is_lease else DEFAULT_FINANCE_TERM)
    rate = interest_rate_for(request.credit_score, term, is_lease)

    if is_lease:
        residual = price * LEASE_RESIDUAL_RATIO
        cap_cost = price - down
        rent_charge = (cap_cost + residual) * (rate / 100 / 12)
        monthly = (cap_cost - residual) / term + rent_charge
        total = monthly * term + down + LEASE_ACQUISITION_FEE
        interest = total - (price - residual) - down - LEASE_ACQUISITION_FEE
    else:
        residual = 0.0
        monthly = amortized_payment(price - down, rate, term)
        total = monthly * term + down
        interest = total - price

    return AffordabilityResult(
        monthly_payment=_round_dollars(monthly),
        total_payment=_round_dollars(total),
        total_interest=_round_dollars(interest),
        interest_rate=rate,
        residual_value=round(residual, 2),
        down_payment=round(down, 2),
        loan_term=term,
        loan_type=request.loan_type,
        credit_category=credit_category(request.credit_score)
    )
