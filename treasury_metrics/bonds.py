from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from .exceptions import ZeroLengthCouponPeriod
from .utils import (
    CouponPeriod,
    DateLike,
    coupon_step_months,
    days_between,
    normalize_to_calendar_day,
    resolve_coupon_period,
)

logger = logging.getLogger(__name__)


class SecurityKind(str, Enum):
    BILL = "BILL"
    NOTE = "NOTE"
    BOND = "BOND"

    @classmethod
    def from_label(cls, label: str) -> "SecurityKind":
        """Parse price-file labels such as 'MARKET BASED BILL' or 'Note'."""
        text = str(label).strip().upper()
        for kind in cls:
            if kind.value in text:
                return kind
        raise ValueError(f"Unrecognised security type: {label!r}")

    @property
    def pays_coupon(self) -> bool:
        return self is not SecurityKind.BILL


@dataclass(frozen=True)
class Instrument:
    maturity: pd.Timestamp
    coupon_rate_pct: float
    face: float = 100.0
    kind: SecurityKind = SecurityKind.NOTE
    freq: int = 2


@dataclass(frozen=True)
class Quote:
    clean_price: float
    settlement: pd.Timestamp


@dataclass(frozen=True)
class AccruedResult:
    fraction_elapsed: float
    days_since_last_coupon: int
    days_in_period: int
    coupon_per_period: float
    accrued_interest: float
    dirty_price: float
    period: CouponPeriod


def calculate_accrued(
    maturity: DateLike,
    coupon_rate_pct: float,
    clean_price: float,
    settlement: DateLike,
    face: float = 100.0,
    freq: int = 2,
) -> AccruedResult:
    """
    Accrued interest and dirty price under Actual/Actual (per coupon period).

    - coupon_rate_pct: annual coupon in percent (4.0 = 4%)
    - clean_price: quoted per 100 face
    - accrued_interest is in currency units of `face`; dirty_price is per 100.

    No rounding is applied.
    """
    period = resolve_coupon_period(settlement, maturity, freq)

    days_since = days_between(period.period_start, settlement)
    days_in_period = days_between(period.period_start, period.period_end)
    if days_in_period <= 0:
        raise ZeroLengthCouponPeriod(period.period_start, period.period_end)

    fraction = days_since / days_in_period

    coupon_per_period = (coupon_rate_pct / 100.0) * face / freq
    accrued = coupon_per_period * fraction
    dirty = clean_price + accrued * (100.0 / face)

    return AccruedResult(
        fraction_elapsed=fraction,
        days_since_last_coupon=days_since,
        days_in_period=days_in_period,
        coupon_per_period=coupon_per_period,
        accrued_interest=accrued,
        dirty_price=dirty,
        period=period,
    )


class AccruedCalculator:
    def __init__(self, max_coupon_pct: float = 25.0):
        self.max_coupon_pct = max_coupon_pct

    def validate(self, instrument: Instrument, settle: pd.Timestamp) -> None:
        if not instrument.kind.pays_coupon:
            raise ValueError("Bills are discount instruments; no accrued interest.")
        coupon_step_months(instrument.freq)
        if instrument.face <= 0:
            raise ValueError(f"Face value must be positive, got {instrument.face}.")
        if not (0.0 <= instrument.coupon_rate_pct <= self.max_coupon_pct):
            raise ValueError(f"Coupon {instrument.coupon_rate_pct}% out of plausible range.")
        if settle >= normalize_to_calendar_day(instrument.maturity):
            raise ValueError("Instrument matured at settlement.")

    def price(self, instrument: Instrument, quote: Quote) -> AccruedResult:
        settle = normalize_to_calendar_day(quote.settlement)
        self.validate(instrument, settle)

        result = calculate_accrued(
            instrument.maturity,
            instrument.coupon_rate_pct,
            quote.clean_price,
            settle,
            face=instrument.face,
            freq=instrument.freq,
        )
        logger.debug("Accrued %.6f over %d/%d days", result.accrued_interest,
                     result.days_since_last_coupon, result.days_in_period)
        return result
