"""Equated Monthly Installment (EMI) for a fixed-rate loan.

    r   = annual_rate / 12
    EMI = P × r × (1 + r)^n / ((1 + r)^n − 1)      (r > 0)
    EMI = P / n                                    (r = 0)

Rates so large that (1 + r)^n leaves the float range raise ``InvalidArgument``.
Only aggregate totals are produced, not a month-by-month schedule.  Values
are returned at full precision so that ``total_payment == EMI × n`` holds
exactly; presentation layers round with ``round_currency``.
"""

from __future__ import annotations

import math

from fincalc.errors import InvalidArgument
from fincalc.models.domain import LoanAmortizationResult
from fincalc.utils.helpers import (
    periodic_rate,
    require_non_negative,
    require_positive,
    require_whole_number,
)


def monthly_installment(principal: float, monthly_rate: float, tenure_months: int) -> float:
    if monthly_rate == 0:
        return principal / tenure_months
    # (1 + r)^n - 1 via expm1/log1p so tiny rates do not collapse to 0.
    try:
        growth_minus_one = math.expm1(tenure_months * math.log1p(monthly_rate))
    except OverflowError:
        raise InvalidArgument(
            f"Interest rate {monthly_rate * 1200:g}% over {tenure_months} months is out of range"
        ) from None
    if growth_minus_one == 0:
        return principal / tenure_months
    return principal * monthly_rate * ((1 + growth_minus_one) / growth_minus_one)


def amortize_loan(
    principal: float,
    annual_rate_percent: float,
    tenure_months: int,
) -> LoanAmortizationResult:
    """Monthly payment, total interest and total payment for a loan.

    Raises ``InvalidArgument`` when ``principal <= 0``, the rate is negative,
    or ``tenure_months`` is not a whole number >= 1.
    """
    principal = require_positive("principal", principal)
    annual_rate_percent = require_non_negative("annual_rate_percent", annual_rate_percent)
    tenure_months = require_whole_number("tenure_months", tenure_months, minimum=1)

    payment = monthly_installment(
        principal, periodic_rate(annual_rate_percent, 12), tenure_months
    )
    # Zero-rate loans repay exactly the principal.
    total_payment = principal if annual_rate_percent == 0 else payment * tenure_months

    return LoanAmortizationResult(
        monthly_payment=payment,
        total_interest=total_payment - principal,
        total_payment=total_payment,
    )
