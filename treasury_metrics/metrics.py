from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .bonds import AccruedCalculator, Instrument, Quote, SecurityKind
from .config import Settings, load_settings
from .records import PriceRecord, PriceTable
from .utils import normalize_to_calendar_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreasuryMetrics:
    """
    Metrics for one security at a settlement date.

    Bills only carry dirty_price (= end-of-day price); the coupon fields stay None
    and are omitted from to_dict().
    """
    cusip: str
    security_type: str
    maturity_date: str
    settlement_date: str
    dirty_price: float
    message: str
    clean_price: Optional[float] = None
    accrued_interest: Optional[float] = None
    days_since_last_coupon: Optional[int] = None
    days_in_period: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def calculate_treasury_metrics(
    record: PriceRecord,
    settlement,
    freq: int = 2,
    calculator: Optional[AccruedCalculator] = None,
) -> TreasuryMetrics:
    kind = SecurityKind.from_label(record.security_type)
    settle = normalize_to_calendar_day(settlement)
    maturity = normalize_to_calendar_day(record.maturity_date)
    settle_str = settle.date().isoformat()
    maturity_str = maturity.date().isoformat()

    if math.isnan(record.end_of_day):
        raise ValueError(f"CUSIP {record.cusip}: no end-of-day price.")

    if not kind.pays_coupon:
        return TreasuryMetrics(
            cusip=record.cusip,
            security_type=record.security_type,
            maturity_date=maturity_str,
            settlement_date=settle_str,
            dirty_price=record.end_of_day,
            message=f"This is a Treasury Bill. Dirty price = END_OF_DAY = {record.end_of_day}",
        )

    if math.isnan(record.rate):
        raise ValueError(f"CUSIP {record.cusip}: no coupon rate for {record.security_type}.")

    calculator = calculator or AccruedCalculator()
    instrument = Instrument(maturity=maturity, coupon_rate_pct=record.rate, kind=kind, freq=freq)
    result = calculator.price(instrument, Quote(clean_price=record.end_of_day, settlement=settle))

    message = "\n".join([
        f"({record.security_type})",
        f"Settlement = {settle_str}",
        f"Clean = {record.end_of_day}",
        f"Accrued interest = {result.accrued_interest:.6f}",
        f"Dirty = clean + accrued = {result.dirty_price:.6f}",
    ])

    return TreasuryMetrics(
        cusip=record.cusip,
        security_type=record.security_type,
        maturity_date=maturity_str,
        settlement_date=settle_str,
        dirty_price=result.dirty_price,
        message=message,
        clean_price=record.end_of_day,
        accrued_interest=result.accrued_interest,
        days_since_last_coupon=result.days_since_last_coupon,
        days_in_period=result.days_in_period,
    )


def lookup_treasury_metrics(
    table: PriceTable,
    cusip: str,
    settlement=None,
    freq: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> TreasuryMetrics:
    """Look up a CUSIP and price it; settlement/frequency default to the configured settings."""
    if settlement is None or freq is None:
        settings = settings or load_settings()
        if settlement is None:
            settlement = settings.settlement_date
        if freq is None:
            freq = settings.coupon_frequency

    record = table.get(cusip)
    logger.info("Pricing %s (%s) for settlement %s", record.cusip, record.security_type, settlement)
    return calculate_treasury_metrics(record, settlement, freq)
