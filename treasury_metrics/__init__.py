"""
Treasury Metrics

Accrued interest and dirty prices for U.S. Treasury bills, notes and bonds.

Modules:
- utils: calendar-day normalisation, day counts, month shifts, T+1 settlement, coupon period resolver
- bonds: instrument/quote/result objects + Actual/Actual accrued-interest calculator
- records: price-file loading + CUSIP lookup
- metrics: bill vs note/bond branch, per-CUSIP result objects
- portfolio: batch metrics over a whole price table with QC flags
- config: environment settings (default settlement date, frequency, price file, log level)
- cli: command line entry point
"""
