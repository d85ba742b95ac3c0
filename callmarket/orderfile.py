"""
Plain-text order records.

Each record is one line of five whitespace-separated fields:

    <side> <price> <quantity> <id> <timestamp>

e.g. `B 500 10 17 0`. Side is "B" or "S"; a timestamp of exactly 0 is
replaced with the current time in nanoseconds. The residual market is
written back in the same format, buys first.
"""

import logging
import time
from collections.abc import Callable, Iterable
from typing import TextIO

from callmarket.errors import OrderParseError
from callmarket.orders import Market, Order, Side

logger = logging.getLogger(__name__)

NUM_FIELDS = 5


def _parse_int(field: str, name: str) -> int:
    try:
        return int(field)
    except ValueError:
        raise OrderParseError(f"Invalid {name} '{field}'") from None


def parse_order(
    line: str,
    clock: Callable[[], int] = time.time_ns,
    default_timestamps: bool = True,
) -> Order:
    """
    Parse one order record.

    Args:
        line: Record text
        clock: Nanosecond clock used when the timestamp is 0
        default_timestamps: Whether to substitute `clock()` for timestamp 0

    Raises:
        OrderParseError: On a bad side tag, wrong field count, non-integer
            field or negative price.
    """
    fields = line.split()
    if len(fields) != NUM_FIELDS:
        raise OrderParseError(f"Expected {NUM_FIELDS} fields, got {len(fields)}: '{line.strip()}'")

    tag, price_s, qty_s, order_id, ts_s = fields
    side = Side.from_tag(tag)
    price = _parse_int(price_s, "price")
    if price < 0:
        raise OrderParseError(f"Invalid price '{price_s}'")
    quantity = _parse_int(qty_s, "quantity")
    submitted_at = _parse_int(ts_s, "timestamp")

    if submitted_at == 0 and default_timestamps:
        submitted_at = clock()

    return Order(side=side, id=order_id, submitted_at=submitted_at, price=price, quantity=quantity)


def read_market(
    lines: Iterable[str],
    clock: Callable[[], int] = time.time_ns,
    default_timestamps: bool = True,
) -> Market:
    """
    Build a market from order records, skipping malformed ones.

    Blank lines are ignored. A malformed record is reported as a warning
    and dropped; it never stops the read.
    """
    market = Market()
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            order = parse_order(line, clock=clock, default_timestamps=default_timestamps)
        except OrderParseError as e:
            logger.warning(f"Line {lineno}: {e}. Ignoring.")
            continue
        market.add(order)

    logger.debug(f"Read {len(market.buys)} buy and {len(market.sells)} sell orders")
    return market


def format_order(order: Order) -> str:
    return f"{order.side.value} {order.price} {order.quantity} {order.id} {order.submitted_at}"


def write_market(market: Market, out: TextIO) -> None:
    """Write every surviving order, buy book then sell book."""
    for book in market.books():
        for order in book:
            out.write(format_order(order) + "\n")
