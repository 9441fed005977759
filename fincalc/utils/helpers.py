"""Shared numeric utilities - validation, rounding, rate conversion."""

from __future__ import annotations

import math
from numbers import Real

from fincalc.config import settings
from fincalc.errors import InvalidArgument


# ── Validation ────────────────────────────────────────────────────────────

def require_number(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidArgument(f"{name} must be finite, got {value!r}")
    return float(value)


def require_non_negative(name: str, value: float) -> float:
    """Return *value* as a float, raising ``InvalidArgument`` if it is < 0."""
    value = require_number(name, value)
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")
    return value


def require_positive(name: str, value: float) -> float:
    """Return *value* as a float, raising ``InvalidArgument`` if it is <= 0."""
    value = require_number(name, value)
    if value <= 0:
        raise InvalidArgument(f"{name} must be positive, got {value}")
    return value


def require_whole_number(name: str, value: int, minimum: int = 0) -> int:
    """Accept ints (and integral floats); reject fractions and values below *minimum*."""
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidArgument(f"{name} must be >= {minimum}, got {value}")
    return value


# ── Rates ─────────────────────────────────────────────────────────────────

def percent_to_fraction(rate_percent: float) -> float:
    """8.5 → 0.085."""
    return rate_percent / 100


def periodic_rate(annual_rate_percent: float, periods_per_year: int) -> float:
    """Nominal annual percent split evenly across sub-periods (e.g. 12 % / 12 = 1 % a month)."""
    return percent_to_fraction(annual_rate_percent) / periods_per_year


# ── Rounding & display ────────────────────────────────────────────────────

def round_currency(value: float, decimals: int = settings.CURRENCY_DECIMALS) -> float:
    """Round to *decimals* places (standard banker-friendly rounding)."""
    return round(value, decimals)


def calendar_year_label(period_index: int, start_year: int) -> int:
    """Period 1 is labelled ``start_year + 1``."""
    return start_year + period_index
