from __future__ import annotations

import logging
import math
from typing import List, Union

import numpy as np
import pandas as pd

from .bonds import AccruedCalculator, SecurityKind
from .exceptions import InvalidDateInput
from .metrics import calculate_treasury_metrics
from .records import PriceRecord, PriceTable
from .utils import normalize_to_calendar_day

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = [
    "cusip",
    "security_type",
    "maturity_date",
    "clean",
    "accrued",
    "dirty",
    "days_since_last_coupon",
    "days_in_period",
    "flags",
]


def qc_flags_for_record(record: PriceRecord, settle: pd.Timestamp, max_coupon_pct: float = 25.0) -> List[str]:
    flags: List[str] = []

    try:
        kind = SecurityKind.from_label(record.security_type)
    except ValueError:
        kind = None
        flags.append("UNKNOWN_TYPE")

    try:
        maturity = normalize_to_calendar_day(record.maturity_date)
    except InvalidDateInput:
        flags.append("BAD_DATE")
    else:
        if settle >= maturity:
            flags.append("MATURED")

    if math.isnan(record.end_of_day):
        flags.append("NO_PRICE")

    if kind is not None and kind.pays_coupon:
        if math.isnan(record.rate):
            flags.append("NO_RATE")
        elif not (0.0 <= record.rate <= max_coupon_pct):
            flags.append("BAD_COUPON")

    return flags


def price_table_metrics(
    table: Union[PriceTable, pd.DataFrame],
    settlement,
    freq: int = 2,
) -> pd.DataFrame:
    """
    Metrics for every row of a price table.

    Rows failing QC are kept with NaN analytics and a '|'-joined flags string.
    clean is NaN for bills (quoted dirty).
    """
    if isinstance(table, pd.DataFrame):
        table = PriceTable(table)

    settle = normalize_to_calendar_day(settlement)
    calculator = AccruedCalculator()

    rows = []
    for record in table.records():
        flags = qc_flags_for_record(record, settle, calculator.max_coupon_pct)
        if flags:
            logger.warning("Skipping %s: %s", record.cusip, "|".join(flags))
            rows.append((record.cusip, record.security_type, record.maturity_date,
                         np.nan, np.nan, np.nan, np.nan, np.nan, "|".join(flags)))
            continue

        m = calculate_treasury_metrics(record, settle, freq, calculator=calculator)
        logger.debug("%s dirty=%.6f", m.cusip, m.dirty_price)
        rows.append((
            m.cusip,
            m.security_type,
            m.maturity_date,
            np.nan if m.clean_price is None else m.clean_price,
            np.nan if m.accrued_interest is None else m.accrued_interest,
            m.dirty_price,
            np.nan if m.days_since_last_coupon is None else m.days_since_last_coupon,
            np.nan if m.days_in_period is None else m.days_in_period,
            "",
        ))

    out = pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
    for c in ("clean", "accrued", "dirty", "days_since_last_coupon", "days_in_period"):
        out[c] = out[c].astype(float)
    return out


def summarize_metrics(priced: pd.DataFrame) -> pd.DataFrame:
    """
    Per security type: priced row count, flagged row count and mean accrued / dirty.

    Every type in `priced` appears, including types whose rows were all flagged.
    Flagged rows carry NaN analytics, so the means only cover priced rows.
    """
    grouped = priced.assign(
        _priced=(priced["flags"] == "").astype(int),
        _flagged=(priced["flags"] != "").astype(int),
    ).groupby("security_type", as_index=False)

    summary = grouped.agg(
        count=("_priced", "sum"),
        flagged=("_flagged", "sum"),
        mean_accrued=("accrued", "mean"),
        mean_dirty=("dirty", "mean"),
    )
    summary["count"] = summary["count"].astype(int)
    summary["flagged"] = summary["flagged"].astype(int)
    return summary
