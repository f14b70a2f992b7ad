from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Union

import pandas as pd

from .exceptions import RecordNotFound

logger = logging.getLogger(__name__)

PRICE_COLUMNS = ("cusip", "security_type", "rate", "maturity_date", "end_of_day")


@dataclass(frozen=True)
class PriceRecord:
    """One end-of-day price row: rate in percent, maturity as an ISO (or M/D/Y) string."""
    cusip: str
    security_type: str
    rate: float
    maturity_date: str
    end_of_day: float


def _normalise_column(name: Any) -> str:
    return str(name).strip().lower().replace(" ", "_").replace("-", "_")


class PriceTable:
    """
    Read-only, in-memory view over a price file.

    Column headers are normalised ('SECURITY TYPE' -> 'security_type'); extra
    columns such as BUY / SELL / CALL DATE are dropped.
    """

    def __init__(self, frame: pd.DataFrame):
        frame = frame.rename(columns=_normalise_column)
        missing = [c for c in PRICE_COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"Price table missing columns: {missing}")

        frame = frame[list(PRICE_COLUMNS)].copy()
        frame["cusip"] = frame["cusip"].astype(str).str.strip().str.upper()
        frame["security_type"] = frame["security_type"].astype(str).str.strip()
        frame["maturity_date"] = frame["maturity_date"].astype(str).str.strip()
        # rates may carry a trailing '%'; only bills may have an empty rate (read as 0).
        # an unparseable note/bond rate stays NaN
        rate = pd.to_numeric(frame["rate"].astype(str).str.strip().str.rstrip("%"), errors="coerce")
        is_bill = frame["security_type"].str.upper().str.contains("BILL", regex=False)
        frame["rate"] = rate.mask(is_bill & rate.isna(), 0.0).astype(float)
        frame["end_of_day"] = pd.to_numeric(frame["end_of_day"], errors="coerce").astype(float)

        self.frame = frame.reset_index(drop=True)

    @classmethod
    def from_records(cls, rows: Iterable[Union[PriceRecord, Dict[str, Any]]]) -> "PriceTable":
        data = [asdict(r) if isinstance(r, PriceRecord) else dict(r) for r in rows]
        return cls(pd.DataFrame(data, columns=None if data else list(PRICE_COLUMNS)))

    def __len__(self) -> int:
        return len(self.frame)

    def __contains__(self, cusip: object) -> bool:
        return bool((self.frame["cusip"] == str(cusip).strip().upper()).any())

    def get(self, cusip: str) -> PriceRecord:
        key = str(cusip).strip().upper()
        hits = self.frame[self.frame["cusip"] == key]
        if hits.empty:
            raise RecordNotFound(cusip)
        if len(hits) > 1:
            logger.warning("CUSIP %s appears %d times; using first row", key, len(hits))
        return self._row_to_record(hits.iloc[0])

    def records(self) -> Iterator[PriceRecord]:
        for _, row in self.frame.iterrows():
            yield self._row_to_record(row)

    @staticmethod
    def _row_to_record(row: pd.Series) -> PriceRecord:
        return PriceRecord(
            cusip=str(row["cusip"]),
            security_type=str(row["security_type"]),
            rate=float(row["rate"]),
            maturity_date=str(row["maturity_date"]),
            end_of_day=float(row["end_of_day"]),
        )


def load_price_file(path: Union[str, Path]) -> PriceTable:
    """Load a CSV price file (header row required)."""
    path = Path(path)
    frame = pd.read_csv(path, dtype=str, skipinitialspace=True)
    table = PriceTable(frame)
    logger.info("Loaded %d price records from %s", len(table), path)
    return table
