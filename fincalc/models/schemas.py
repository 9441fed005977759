"""Pydantic request / response schemas for all API endpoints.

Field names are camelCase on the wire, matching the dashboard's forms:
  - Projection → generic lump sum + recurring contribution
  - SIP / Plan → the calculator and goal-planner presets of a projection
  - EMI        → loan totals
  - Tax        → slab tax and Section 80C deduction impact
"""

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from fincalc.config import settings
from fincalc.models.domain import ContributionTiming, RiskTolerance

# ── 1. Projection  (/projections:project) ────────────────────────────────

class ProjectRequest(BaseModel):
    initialAmount: float = Field(..., ge=0, description="Lump sum invested at period 0")
    recurringContribution: float = Field(0.0, ge=0, description="Contribution per sub-period")
    annualRatePercent: float = Field(..., gt=-100, le=settings.MAX_RATE_PERCENT, description="Nominal annual rate, e.g. 8.5")
    horizonYears: int = Field(..., ge=0, le=settings.MAX_HORIZON_YEARS, description="Years to project")
    periodsPerYear: int = Field(12, ge=1, le=365, description="Contributions per year (12 = monthly)")
    contributionTiming: ContributionTiming = Field(
        ContributionTiming.START_OF_PERIOD,
        description="'start-of-period' (annuity-due) or 'end-of-period' (ordinary annuity)",
    )

class ProjectionPointOut(BaseModel):
    year: int = Field(..., description="Period index, starting at 1")
    value: float = Field(..., description="Projected value at the end of the year")
    calendarYear: Optional[int] = Field(None, description="Display label: startYear + year")

class ProjectResponse(BaseModel):
    projection: List[ProjectionPointOut]
    finalValue: float
    totalContributed: float
    totalGrowth: float = Field(..., description="finalValue − totalContributed − initialAmount")

# ── 2. SIP Calculator  (/projections:sip) ────────────────────────────────

class SipRequest(BaseModel):
    monthlyInvestment: float = Field(..., ge=1, description="Monthly SIP amount")
    timePeriod: int = Field(..., ge=1, le=settings.MAX_HORIZON_YEARS, description="Years")
    returnRate: float = Field(..., ge=0, le=settings.MAX_RATE_PERCENT, description="Expected annual return in percent")

class SipResponse(BaseModel):
    totalInvested: float
    expectedReturns: float
    maturityValue: float

# ── 3. Goal Planner  (/projections:plan) ─────────────────────────────────

class PlanRequest(BaseModel):
    goal: str = Field(..., min_length=5, description="What the user is saving for")
    timeframe: int = Field(..., ge=1, le=settings.MAX_HORIZON_YEARS, description="Years")
    initialInvestment: float = Field(..., ge=0)
    monthlyContribution: float = Field(..., ge=0)
    riskTolerance: RiskTolerance
    startYear: Optional[int] = Field(None, description="Year 1 is labelled startYear + 1; defaults to the current year")

class PlanResponse(ProjectResponse):
    goal: str
    riskTolerance: RiskTolerance
    annualRatePercent: float = Field(..., description="Growth rate used for the risk tolerance")

# ── 4. EMI Calculator  (/loans:emi) ──────────────────────────────────────

class EmiRequest(BaseModel):
    loanAmount: float = Field(..., gt=0, examples=[1_000_000])
    interestRate: float = Field(..., ge=0, le=settings.MAX_RATE_PERCENT, description="Annual rate in percent", examples=[8.5])
    tenure: int = Field(..., ge=1, description="Tenure in months", examples=[120])

class EmiResponse(BaseModel):
    monthlyEmi: float
    totalInterest: float
    totalPayment: float

# ── 5. Tax  (/tax:compute, /tax:deduction, /tax/schedules) ───────────────

class TaxRequest(BaseModel):
    annualIncome: float = Field(..., ge=0, description="Annual taxable income in INR")
    schedule: Optional[str] = Field(None, description="Registered schedule name; default if omitted")
    rebateThreshold: Optional[float] = Field(None, ge=0)
    cessRate: Optional[float] = Field(None, ge=0, le=1)

class SlabOut(BaseModel):
    lowerBound: float
    upperBound: Optional[float] = Field(None, description="null for the unbounded top slab")
    rate: float
    taxableAmount: float = 0.0
    tax: float = 0.0

class TaxResponse(BaseModel):
    schedule: str
    tax: float = Field(..., description="Slab tax before cess (0 within the rebate)")
    taxWithCess: float
    rebateApplied: bool
    slabs: List[SlabOut]

class DeductionRequest(BaseModel):
    annualIncome: float = Field(..., ge=0)
    existingInvestments: float = Field(..., ge=0, description="Section 80C investments so far")
    deductionLimit: Optional[float] = Field(None, ge=0)
    schedule: Optional[str] = None
    rebateThreshold: Optional[float] = Field(None, ge=0)
    cessRate: Optional[float] = Field(None, ge=0, le=1)

class DeductionResponse(BaseModel):
    taxWithoutDeduction: float
    taxWithDeduction: float
    taxSaved: float
    availableLimit: float = Field(..., description="Remaining deduction headroom")

class ScheduleOut(BaseModel):
    name: str
    slabs: List[SlabOut]

class SchedulesResponse(BaseModel):
    default: str
    schedules: List[ScheduleOut]

# ── 6. History  (/history) ───────────────────────────────────────────────

class HistoryEntry(BaseModel):
    kind: str
    inputs: Dict[str, Any]
    outputs: Dict[str, Any]
    recordedAt: datetime

class HistoryResponse(BaseModel):
    entries: List[HistoryEntry]

# ── 7. Performance Report  (/performance) ────────────────────────────────

class PerformanceResponse(BaseModel):
    time: str = Field(..., description="Last response time (HH:mm:ss.SSS)")
    memory: str = Field(..., description="Current memory usage (e.g. '123.45 MB')")
    threads: int = Field(..., description="Number of active threads")
