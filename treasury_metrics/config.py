from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from .utils import coupon_step_months, normalize_to_calendar_day

DEFAULT_SETTLEMENT_DATE = "2025-11-18"
DEFAULT_FREQUENCY = 2
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    settlement_date: pd.Timestamp
    coupon_frequency: int = DEFAULT_FREQUENCY
    price_file: Optional[Path] = None
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Settings from the environment:
    - SETTLEMENT_DATE: default settlement date (ISO)
    - TREASURY_COUPON_FREQUENCY: 1, 2, 4 or 12
    - TREASURY_PRICE_FILE: CSV used when no --prices is given
    - TREASURY_LOG_LEVEL: logging level name
    """
    env = os.environ if environ is None else environ

    settlement = normalize_to_calendar_day(env.get("SETTLEMENT_DATE") or DEFAULT_SETTLEMENT_DATE)

    raw_freq = env.get("TREASURY_COUPON_FREQUENCY") or str(DEFAULT_FREQUENCY)
    try:
        freq = int(raw_freq)
    except ValueError:
        raise ValueError(f"TREASURY_COUPON_FREQUENCY must be an integer, got {raw_freq!r}") from None
    coupon_step_months(freq)

    price_file = env.get("TREASURY_PRICE_FILE")

    log_level = (env.get("TREASURY_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown TREASURY_LOG_LEVEL: {log_level!r}")

    return Settings(
        settlement_date=settlement,
        coupon_frequency=freq,
        price_file=Path(price_file) if price_file else None,
        log_level=log_level,
    )
