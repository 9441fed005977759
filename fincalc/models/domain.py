"""Immutable value objects exchanged with the calculation engine.

Every object is constructed once per request and frozen afterwards.
Monetary fields are decimal major currency units (rupees, not paise).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ContributionTiming(str, Enum):
    """When a recurring contribution lands inside its sub-period."""

    END_OF_PERIOD = "end-of-period"      # ordinary annuity
    START_OF_PERIOD = "start-of-period"  # annuity-due


class RiskTolerance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProjectionRequest(_Frozen):
    initial_amount: float
    recurring_contribution: float
    annual_rate_percent: float
    horizon_years: int
    periods_per_year: int = 12
    contribution_timing: ContributionTiming = ContributionTiming.START_OF_PERIOD


class ProjectionPoint(_Frozen):
    period_index: int
    value: float
    calendar_year: Optional[int] = None


class ProjectionResult(_Frozen):
    points: List[ProjectionPoint]
    initial_amount: float
    total_contributed: float
    total_growth: float

    @property
    def final_value(self) -> float:
        """Terminal value; the initial amount when the horizon is zero."""
        if not self.points:
            return self.initial_amount
        return self.points[-1].value


class SipResult(_Frozen):
    total_invested: float
    expected_returns: float
    maturity_value: float


class LoanAmortizationResult(_Frozen):
    monthly_payment: float
    total_interest: float
    total_payment: float


class TaxComputationResult(_Frozen):
    tax_before_deduction: float
    tax_after_deduction: float
    tax_saved: float
    available_deduction_headroom: float


class CalculationRecord(_Frozen):
    """One completed calculation, as kept by a ``HistoryStore``."""

    kind: str
    inputs: Dict[str, Any]
    outputs: Dict[str, Any]
    recorded_at: datetime
