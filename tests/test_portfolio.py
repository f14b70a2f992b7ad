import numpy as np
import pandas as pd
import pytest

from treasury_metrics.portfolio import price_table_metrics, summarize_metrics


@pytest.fixture(scope="module")
def settle():
    return pd.Timestamp("2025-11-18")


@pytest.fixture(scope="module")
def prices_df():
    """
    Mixed price table: two clean names plus one row per QC failure.
    """
    return pd.DataFrame(
        [
            {"CUSIP": "91282CKP5", "SECURITY TYPE": "MARKET BASED NOTE", "RATE": "4.000%",
             "MATURITY DATE": "2026-05-15", "END OF DAY": "99.84375"},
            {"CUSIP": "912797QX8", "SECURITY TYPE": "MARKET BASED BILL", "RATE": "",
             "MATURITY DATE": "2026-01-15", "END OF DAY": "99.512"},
            {"CUSIP": "912828ZZ0", "SECURITY TYPE": "MARKET BASED NOTE", "RATE": "0.250%",
             "MATURITY DATE": "2025-10-31", "END OF DAY": "100.0"},
            {"CUSIP": "BADDATE01", "SECURITY TYPE": "MARKET BASED BOND", "RATE": "3.0",
             "MATURITY DATE": "someday", "END OF DAY": "98.0"},
            {"CUSIP": "91282CFRN", "SECURITY TYPE": "MARKET BASED FRN", "RATE": "0.1",
             "MATURITY DATE": "2027-01-31", "END OF DAY": "100.02"},
            {"CUSIP": "NOPRICE01", "SECURITY TYPE": "MARKET BASED NOTE", "RATE": "2.000%",
             "MATURITY DATE": "2027-05-15", "END OF DAY": ""},
            {"CUSIP": "BADCPN001", "SECURITY TYPE": "MARKET BASED NOTE", "RATE": "40.000%",
             "MATURITY DATE": "2027-05-15", "END OF DAY": "120.0"},
            {"CUSIP": "NORATE001", "SECURITY TYPE": "MARKET BASED NOTE", "RATE": "N/A",
             "MATURITY DATE": "2026-05-15", "END OF DAY": "99.84375"},
        ]
    )


@pytest.fixture(scope="module")
def priced(prices_df, settle):
    return price_table_metrics(prices_df, settle)


def test_output_columns(priced):
    assert {"cusip", "clean", "accrued", "dirty", "days_since_last_coupon", "days_in_period", "flags"}.issubset(
        priced.columns
    )
    assert len(priced) == 8


def test_clean_rows_priced(priced):
    note = priced.set_index("cusip").loc["91282CKP5"]
    assert note["flags"] == ""
    assert note["accrued"] == pytest.approx(6 / 181)
    assert note["dirty"] == pytest.approx(99.84375 + 6 / 181)
    assert note["days_in_period"] == 181

    bill = priced.set_index("cusip").loc["912797QX8"]
    assert bill["flags"] == ""
    assert bill["dirty"] == 99.512
    assert np.isnan(bill["clean"])
    assert np.isnan(bill["accrued"])


@pytest.mark.parametrize(
    "cusip, flag",
    [
        ("912828ZZ0", "MATURED"),
        ("BADDATE01", "BAD_DATE"),
        ("91282CFRN", "UNKNOWN_TYPE"),
        ("NOPRICE01", "NO_PRICE"),
        ("BADCPN001", "BAD_COUPON"),
        ("NORATE001", "NO_RATE"),
    ],
)
def test_flagged_rows_kept_with_nan(priced, cusip, flag):
    row = priced.set_index("cusip").loc[cusip]
    assert flag in row["flags"].split("|")
    assert np.isnan(row["dirty"])


def test_dirty_clean_identity_on_batch(priced):
    notes = priced[(priced["flags"] == "") & priced["clean"].notna()]
    assert np.allclose(notes["dirty"] - notes["clean"], notes["accrued"], atol=1e-12)


def test_summary_counts(priced):
    summary = summarize_metrics(priced).set_index("security_type")
    assert summary.loc["MARKET BASED NOTE", "count"] == 1
    assert summary.loc["MARKET BASED NOTE", "flagged"] == 4
    assert summary.loc["MARKET BASED BILL", "count"] == 1
    assert summary.loc["MARKET BASED BILL", "flagged"] == 0


def test_summary_keeps_types_with_only_flagged_rows(priced):
    summary = summarize_metrics(priced).set_index("security_type")
    for label in ("MARKET BASED BOND", "MARKET BASED FRN"):
        assert summary.loc[label, "count"] == 0
        assert summary.loc[label, "flagged"] == 1
        assert np.isnan(summary.loc[label, "mean_dirty"])
    assert summary["flagged"].sum() == (priced["flags"] != "").sum(), "every flagged row must be counted"
    assert summary["count"].sum() + summary["flagged"].sum() == len(priced)


def test_unparseable_note_rate_is_flagged_not_zeroed(priced):
    row = priced.set_index("cusip").loc["NORATE001"]
    assert row["flags"] == "NO_RATE"
    assert np.isnan(row["accrued"])
