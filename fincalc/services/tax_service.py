"""Progressive income-tax calculations over named slab schedules.

Default schedule - New Regime FY2023-24:
    ₹0 – ₹3,00,000            → 0 %
    ₹3,00,001 – ₹6,00,000     → 5 %
    ₹6,00,001 – ₹9,00,000     → 10 %
    ₹9,00,001 – ₹12,00,000    → 15 %
    ₹12,00,001 – ₹15,00,000   → 20 %
    Above ₹15,00,000           → 30 %

Income at or below the rebate threshold (₹7,00,000, Section 87A) pays no
tax.  A 4 % health & education cess is added on top of the slab tax.

Worked example (₹10,00,000, ₹50,000 invested under Section 80C):
    Tax(10 L)   = 15,000 + 30,000 + 15,000 = 60,000 → with cess 62,400
    Tax(9.5 L)  = 15,000 + 30,000 + 7,500  = 52,500 → with cess 54,600
    Saved       = 7,800;  headroom = 1,50,000 − 50,000 = 1,00,000
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict, List, NamedTuple, Optional, Tuple

from fincalc.config import settings
from fincalc.errors import InvalidArgument
from fincalc.models.domain import TaxComputationResult
from fincalc.utils.helpers import require_non_negative, require_number, round_currency

logger = logging.getLogger(__name__)


class TaxBracket(NamedTuple):
    """A slab; its lower edge is the previous bracket's upper bound (or 0)."""

    upper_bound: float
    rate: float


class SlabTax(NamedTuple):
    lower_bound: float
    upper_bound: float
    rate: float
    taxable_amount: float
    tax: float


@dataclass(frozen=True)
class TaxSchedule:
    """An immutable, validated marginal-rate schedule.

    Upper bounds must be strictly increasing and the last one must be
    ``math.inf``; every rate must lie in [0, 1].
    """

    name: str
    brackets: Tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        try:
            brackets = tuple(TaxBracket(*b) for b in self.brackets)
        except TypeError:
            raise InvalidArgument(
                f"Schedule '{self.name}': brackets must be (upper_bound, rate) pairs, "
                f"got {self.brackets!r}"
            ) from None
        if not brackets:
            raise InvalidArgument(f"Schedule '{self.name}' has no brackets")

        previous = 0.0
        for upper, rate in brackets:
            if isinstance(upper, bool) or not isinstance(upper, Real) or math.isnan(upper):
                raise InvalidArgument(
                    f"Schedule '{self.name}': upper bound must be a number, got {upper!r}"
                )
            rate = require_number("rate", rate)
            if upper <= previous:
                raise InvalidArgument(
                    f"Schedule '{self.name}': upper bounds must be strictly increasing "
                    f"and positive, got {upper} after {previous}"
                )
            if not 0 <= rate <= 1:
                raise InvalidArgument(
                    f"Schedule '{self.name}': rate must be within [0, 1], got {rate}"
                )
            previous = upper

        if not math.isinf(brackets[-1].upper_bound):
            raise InvalidArgument(
                f"Schedule '{self.name}': the last bracket must be unbounded (math.inf)"
            )
        # Normalised copy (lists → tuples of TaxBracket) on a frozen instance.
        object.__setattr__(self, "brackets", brackets)

    def slabs(self) -> List[Tuple[float, float, float]]:
        """``(lower_bound, upper_bound, rate)`` triples in ascending order."""
        out = []
        lower = 0.0
        for upper, rate in self.brackets:
            out.append((lower, upper, rate))
            lower = upper
        return out

    def slab_tax(self, income: float) -> float:
        """Raw marginal tax on *income*, no rebate, no rounding."""
        tax = 0.0
        for lower, upper, rate in self.slabs():
            if income <= lower:
                break
            tax += (min(income, upper) - lower) * rate
        return tax

    def slab_breakdown(self, income: float) -> List[SlabTax]:
        """Per-slab taxable amount and tax (rounded), for display."""
        rows = []
        for lower, upper, rate in self.slabs():
            taxable = max(0.0, min(income, upper) - lower)
            rows.append(
                SlabTax(lower, upper, rate, round_currency(taxable), round_currency(taxable * rate))
            )
        return rows


# ── Schedule registry ─────────────────────────────────────────────────────

NEW_REGIME_FY2023_24 = TaxSchedule(
    name="New Regime FY2023-24",
    brackets=(
        TaxBracket(300_000.0, 0.00),
        TaxBracket(600_000.0, 0.05),
        TaxBracket(900_000.0, 0.10),
        TaxBracket(1_200_000.0, 0.15),
        TaxBracket(1_500_000.0, 0.20),
        TaxBracket(math.inf, 0.30),
    ),
)

_SCHEDULES: Dict[str, TaxSchedule] = {}


def register_schedule(schedule: TaxSchedule) -> TaxSchedule:
    """Make *schedule* available by name.  Names are unique."""
    if schedule.name in _SCHEDULES:
        raise InvalidArgument(f"Schedule '{schedule.name}' is already registered")
    _SCHEDULES[schedule.name] = schedule
    logger.debug("Registered tax schedule %r (%d brackets)", schedule.name, len(schedule.brackets))
    return schedule


def get_schedule(name: Optional[str] = None) -> TaxSchedule:
    """Look up a schedule by name; ``None`` means the configured default."""
    name = name or settings.DEFAULT_SCHEDULE
    try:
        return _SCHEDULES[name]
    except KeyError:
        raise InvalidArgument(
            f"Unknown tax schedule '{name}'. Available: {', '.join(sorted(_SCHEDULES))}."
        ) from None


def list_schedules() -> List[TaxSchedule]:
    return list(_SCHEDULES.values())


register_schedule(NEW_REGIME_FY2023_24)


# ── Public API ────────────────────────────────────────────────────────────

def _resolve(schedule: TaxSchedule | str | None) -> TaxSchedule:
    if isinstance(schedule, TaxSchedule):
        return schedule
    return get_schedule(schedule)


def _raw_tax(income: float, schedule: TaxSchedule, rebate_threshold: float) -> float:
    if income <= rebate_threshold:
        return 0.0
    return schedule.slab_tax(income)


def compute_tax(
    income: float,
    schedule: TaxSchedule | str | None = None,
    rebate_threshold: Optional[float] = None,
) -> float:
    """Pre-cess tax on *income* (rounded to 2 dp).

    Parameters
    ----------
    income:
        Annual taxable income in INR; must be non-negative.
    schedule:
        A ``TaxSchedule``, a registered schedule name, or ``None`` for the default.
    rebate_threshold:
        Income at or below which tax is zero; defaults to ``settings.REBATE_THRESHOLD``.
    """
    income = require_non_negative("income", income)
    if rebate_threshold is None:
        rebate_threshold = settings.REBATE_THRESHOLD
    rebate_threshold = require_non_negative("rebate_threshold", rebate_threshold)
    return round_currency(_raw_tax(income, _resolve(schedule), rebate_threshold))


def compute_tax_with_cess(
    income: float,
    schedule: TaxSchedule | str | None = None,
    rebate_threshold: Optional[float] = None,
    cess_rate: Optional[float] = None,
) -> float:
    """``compute_tax(...) × (1 + cess_rate)``, rounded once at the end."""
    income = require_non_negative("income", income)
    if rebate_threshold is None:
        rebate_threshold = settings.REBATE_THRESHOLD
    if cess_rate is None:
        cess_rate = settings.CESS_RATE
    rebate_threshold = require_non_negative("rebate_threshold", rebate_threshold)
    cess_rate = require_non_negative("cess_rate", cess_rate)

    tax = _raw_tax(income, _resolve(schedule), rebate_threshold)
    return round_currency(tax * (1 + cess_rate))


def compute_deduction_impact(
    gross_income: float,
    investment: float,
    deduction_limit: Optional[float] = None,
    schedule: TaxSchedule | str | None = None,
    rebate_threshold: Optional[float] = None,
    cess_rate: Optional[float] = None,
) -> TaxComputationResult:
    """Tax (with cess) before and after deducting *investment*, capped at the limit.

    ``tax_saved`` is never negative: lowering taxable income never raises tax.
    """
    gross_income = require_non_negative("gross_income", gross_income)
    investment = require_non_negative("investment", investment)
    if deduction_limit is None:
        deduction_limit = settings.DEDUCTION_LIMIT
    deduction_limit = require_non_negative("deduction_limit", deduction_limit)

    deductible = min(investment, deduction_limit)
    taxable_after = max(0.0, gross_income - deductible)

    before = compute_tax_with_cess(gross_income, schedule, rebate_threshold, cess_rate)
    after = compute_tax_with_cess(taxable_after, schedule, rebate_threshold, cess_rate)

    return TaxComputationResult(
        tax_before_deduction=before,
        tax_after_deduction=after,
        tax_saved=round_currency(before - after),
        available_deduction_headroom=round_currency(max(0.0, deduction_limit - investment)),
    )

