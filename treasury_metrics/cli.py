from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import load_settings
from .exceptions import TreasuryMetricsError
from .metrics import lookup_treasury_metrics
from .portfolio import price_table_metrics, summarize_metrics
from .records import load_price_file
from .utils import next_settlement_date

logger = logging.getLogger(__name__)


def _price_table(args, settings):
    path = args.prices or settings.price_file
    if path is None:
        raise ValueError("No price file: pass --prices or set TREASURY_PRICE_FILE.")
    return load_price_file(path)


def cmd_metrics(args, settings) -> None:
    table = _price_table(args, settings)
    metrics = lookup_treasury_metrics(
        table,
        args.cusip,
        settlement=args.settlement or settings.settlement_date,
        freq=args.freq or settings.coupon_frequency,
    )
    if args.json:
        print(json.dumps(metrics.to_dict(), indent=2))
    else:
        print(f"{metrics.cusip}  maturity {metrics.maturity_date}")
        print(metrics.message)


def cmd_table(args, settings) -> None:
    table = _price_table(args, settings)
    priced = price_table_metrics(
        table,
        args.settlement or settings.settlement_date,
        freq=args.freq or settings.coupon_frequency,
    )
    print(priced.to_string(index=False))
    if args.summary:
        print()
        print(summarize_metrics(priced).to_string(index=False))


def cmd_settlement_date(args, settings) -> None:
    print(next_settlement_date(args.trade_date).date().isoformat())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treasury-metrics",
        description="Accrued interest and dirty prices for U.S. Treasuries.",
    )
    subparsers = parser.add_subparsers(dest="command")

    metrics_parser = subparsers.add_parser("metrics", help="Accrued interest / dirty price for one CUSIP")
    metrics_parser.add_argument("cusip", help="Treasury CUSIP")
    metrics_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    table_parser = subparsers.add_parser("table", help="Metrics for every security in the price file")
    table_parser.add_argument("--summary", action="store_true", help="Append per-type summary")

    for p in (metrics_parser, table_parser):
        p.add_argument("--prices", help="Price CSV (defaults to TREASURY_PRICE_FILE)")
        p.add_argument("--settlement", help="Settlement date, YYYY-MM-DD (defaults to SETTLEMENT_DATE)")
        p.add_argument("--freq", type=int, choices=(1, 2, 4, 12), help="Coupons per year")

    settle_parser = subparsers.add_parser("settlement-date", help="T+1 settlement date for a trade date")
    settle_parser.add_argument("trade_date", help="Trade date, YYYY-MM-DD")

    return parser


COMMANDS = {
    "metrics": cmd_metrics,
    "table": cmd_table,
    "settlement-date": cmd_settlement_date,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    try:
        handler(args, settings)
    except (TreasuryMetricsError, ValueError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
