from __future__ import annotations


class TreasuryMetricsError(Exception):
    """Base class for errors raised by treasury_metrics."""


class RecordNotFound(TreasuryMetricsError, LookupError):
    def __init__(self, cusip: str):
        super().__init__(f"CUSIP {cusip} not found.")
        self.cusip = cusip


class InvalidDateInput(TreasuryMetricsError, ValueError):
    def __init__(self, value, reason: str = ""):
        msg = f"Invalid date input: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
        self.value = value


class ZeroLengthCouponPeriod(TreasuryMetricsError, ArithmeticError):
    """Coupon period resolved to zero (or negative) days. Never expected for valid schedules."""

    def __init__(self, period_start, period_end):
        super().__init__(f"Zero-length coupon period: {period_start} -> {period_end}")
        self.period_start = period_start
        self.period_end = period_end
