"""
Command-line entry point.

Usage:
    callmarket [file] [--config run.yaml] [key=value ...]

Reads order records from `file` (stdin when omitted), clears the call
auction, writes the residual market to stdout and the outcome plus the
elapsed clearing time to stderr.
"""

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from callmarket.config import load_config
from callmarket.equilibrium import double_auction
from callmarket.metrics import (
    calculate_actual_surplus,
    calculate_allocative_efficiency,
    calculate_max_surplus,
)
from callmarket.orderfile import read_market, write_market
from callmarket.orders import Side
from callmarket.pricing import pricing_rule_from_config
from callmarket.report import write_fills_csv

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s][%(name)s][%(levelname)s] - %(message)s"


def _build_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, add_help=False, description="Clear a one-shot call auction")
    parser.add_argument("inputs", nargs="*", help="Order file and/or key=value config overrides")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("-h", "--help", action="store_true", help="Show usage and exit")
    return parser


def _usage(prog: str) -> None:
    print("USAGE:", file=sys.stderr)
    print(f"{prog} [file] [--config run.yaml] [key=value ...]", file=sys.stderr)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper())
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def main(argv: Sequence[str] | None = None, prog: str = "callmarket") -> int:
    """Run one auction; returns the process exit status."""
    args = _build_parser(prog).parse_args(argv)

    # Existing files win over key=value overrides, so "run=1.txt" still reads as a path
    paths = [a for a in args.inputs if "=" not in a or Path(a).is_file()]
    overrides = [a for a in args.inputs if a not in paths]

    if args.help or len(paths) > 1:
        _usage(prog)
        return 1

    try:
        cfg = load_config(args.config, overrides)
    except OSError:
        print(f"Error opening '{args.config}'. Aborting.", file=sys.stderr)
        _usage(prog)
        return 1
    _configure_logging(cfg.logging.level)
    pricing = pricing_rule_from_config(cfg.pricing)
    logger.debug(f"Pricing rule: {pricing!r}")

    if paths:
        try:
            stream = open(paths[0])
        except OSError:
            print(f"Error opening '{paths[0]}'. Aborting.", file=sys.stderr)
            _usage(prog)
            return 1
        with stream:
            market = read_market(stream, default_timestamps=cfg.ingest.default_timestamps)
    else:
        market = read_market(sys.stdin, default_timestamps=cfg.ingest.default_timestamps)

    logger.debug(
        f"Read {len(market)} orders: {market.total_quantity(Side.BUY)} to buy, "
        f"{market.total_quantity(Side.SELL)} to sell"
    )
    max_surplus = calculate_max_surplus(market.buys, market.sells)

    t0 = time.perf_counter()
    result = double_auction(market, pricing)
    elapsed = time.perf_counter() - t0

    write_market(market, sys.stdout)

    if result.found:
        print(f"Equilibrium found at p={result.price}, q={result.quantity}.", file=sys.stderr)
    else:
        print("No equilibrium found.", file=sys.stderr)
    print(f"Elapsed {elapsed:g}s.", file=sys.stderr)

    actual = calculate_actual_surplus(result.fills, result.price)
    efficiency = calculate_allocative_efficiency(actual["total_surplus"], max_surplus)
    logger.info(
        f"Surplus: buyers={actual['buyer_surplus']}, sellers={actual['seller_surplus']}, "
        f"max={max_surplus}, efficiency={efficiency:.2f}%"
    )

    if cfg.report.fills_csv is not None:
        write_fills_csv(result.fills, result.price, cfg.report.fills_csv)

    return 0


if __name__ == "__main__":
    sys.exit(main())
