"""
Settlement of a clearing (price, quantity) against both order books.

Each book is walked in priority order and consumes the equilibrium quantity:
- Order quantity <= remaining need: full fill, order removed
- Otherwise: partial fill, order reduced by the remaining need, walk stops

Every walked order is checked for individual rationality, and each walk must
exhaust the equilibrium quantity. Both checks raise InvariantViolation.
"""

import logging
from typing import NamedTuple

from callmarket.errors import InvariantViolation
from callmarket.orders import Market, Order, OrderBook, Side

logger = logging.getLogger(__name__)


class Fill(NamedTuple):
    """Quantity taken from one order during settlement."""

    side: Side
    order_id: str
    limit_price: int
    quantity: int
    submitted_at: int


def _check_rationality(order: Order, price: int) -> None:
    if order.side == Side.BUY and order.price < price:
        raise InvariantViolation(
            f"Buy order {order.id} with limit {order.price} would settle above it at {price}"
        )
    if order.side == Side.SELL and order.price > price:
        raise InvariantViolation(
            f"Sell order {order.id} with limit {order.price} would settle below it at {price}"
        )


def settle_book(book: OrderBook, price: int, quantity: int) -> list[Fill]:
    """
    Apply a clearing to one ranked book in place.

    Args:
        book: Orders of one side in priority order
        price: Clearing price
        quantity: Equilibrium quantity to take from this side

    Returns:
        One Fill per order touched, in priority order.

    Raises:
        InvariantViolation: If a walked order's limit is worse than the
            clearing price, or the book cannot supply the full quantity.
    """
    need = quantity
    fills: list[Fill] = []
    filled_ids: set[int] = set()

    for order in book:
        _check_rationality(order, price)

        if order.quantity <= need:
            fills.append(Fill(order.side, order.id, order.price, order.quantity, order.submitted_at))
            filled_ids.add(id(order))
            need -= order.quantity
            if need <= 0:
                break
        else:
            fills.append(Fill(order.side, order.id, order.price, need, order.submitted_at))
            order.quantity -= need
            need = 0
            break

    if need > 0:
        raise InvariantViolation(
            f"Settlement left {need} of {quantity} unfilled on the book"
        )

    # Identity rather than order.id: ids are opaque and may repeat
    book[:] = [o for o in book if id(o) not in filled_ids]

    for fill in fills:
        logger.debug(f"Filled {fill.side.name} {fill.order_id}: {fill.quantity} @ {price}")

    return fills


def settle(market: Market, price: int, quantity: int) -> list[Fill]:
    """Settle both books, buys first; returns the fills of both sides."""
    fills: list[Fill] = []
    for book in market.books():
        fills.extend(settle_book(book, price, quantity))
    return fills
