from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Tuple, Union

import pandas as pd

from .exceptions import InvalidDateInput

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]

SUPPORTED_FREQUENCIES: Tuple[int, ...] = (1, 2, 4, 12)


@dataclass(frozen=True)
class CouponPeriod:
    period_start: pd.Timestamp
    period_end: pd.Timestamp


def normalize_to_calendar_day(d: DateLike) -> pd.Timestamp:
    """
    Coerce a date-like value to a naive midnight Timestamp.

    Accepts datetime.date / datetime / pandas.Timestamp / ISO string.
    Timezone-aware instants are converted to UTC before the time of day is dropped,
    so two instants inside the same UTC day always land on the same calendar day.
    """
    if isinstance(d, str):
        d = d.strip()
    try:
        ts = pd.Timestamp(d)
    except (ValueError, TypeError) as exc:
        raise InvalidDateInput(d, str(exc)) from exc

    if pd.isna(ts):
        raise InvalidDateInput(d, "empty or NaT")

    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.normalize()


def days_between(a: DateLike, b: DateLike) -> int:
    """Whole calendar days from a to b (negative if a is after b)."""
    return int((normalize_to_calendar_day(b) - normalize_to_calendar_day(a)).days)


def add_months(d: DateLike, months: int) -> pd.Timestamp:
    """
    Shift by a number of months, clamping to month end.

    If the target month is shorter than the source day-of-month the result is
    the last day of the target month: 2025-08-31 - 6M = 2025-02-28,
    2024-08-31 - 6M = 2024-02-29. Days never roll over into the following month.
    """
    return normalize_to_calendar_day(d) + pd.DateOffset(months=int(months))


def next_settlement_date(trade_date: DateLike) -> pd.Timestamp:
    """
    T+1 settlement, rolled forward off weekends.
    Holidays are not modelled: a holiday settlement date is returned unchanged.
    """
    d = normalize_to_calendar_day(trade_date) + pd.Timedelta(days=1)

    if d.weekday() == 5:  # Saturday
        d += pd.Timedelta(days=2)
    elif d.weekday() == 6:  # Sunday
        d += pd.Timedelta(days=1)
    return d


def coupon_step_months(freq: int) -> int:
    if freq not in SUPPORTED_FREQUENCIES:
        raise ValueError(f"Unsupported coupon frequency {freq!r}; expected one of {SUPPORTED_FREQUENCIES}.")
    return 12 // freq


def resolve_coupon_period(settlement: DateLike, maturity: DateLike, freq: int = 2) -> CouponPeriod:
    """
    Coupon period bracketing settlement: period_start <= settlement < period_end.

    Coupons fall on the maturity day-of-month every 12/freq months, stepping back
    from maturity. Every candidate is computed from the maturity anchor
    (maturity - k * step), so month-end clamping never drifts the schedule.
    Chaining shifts off the previous coupon instead would turn 31 Aug into 28 Aug
    after passing through February.
    """
    step = coupon_step_months(freq)
    settle = normalize_to_calendar_day(settlement)
    maturity = normalize_to_calendar_day(maturity)

    if settle >= maturity:
        raise ValueError(f"Settlement {settle.date()} is on/after maturity {maturity.date()}.")

    k = 1
    next_coupon = maturity
    last_coupon = add_months(maturity, -step)
    while settle < last_coupon:
        k += 1
        next_coupon = last_coupon
        last_coupon = add_months(maturity, -k * step)

    logger.debug("Coupon period for settle=%s maturity=%s: %s -> %s", settle.date(), maturity.date(),
                 last_coupon.date(), next_coupon.date())
    return CouponPeriod(period_start=last_coupon, period_end=next_coupon)
