"""
Quote engine.

Answers "what price would the book ask/pay for this much quantity, and is
that much quantity there at all?" by walking a ranked book in priority order.
"""

from typing import NamedTuple

from callmarket.orders import OrderBook


class Quote(NamedTuple):
    """Marginal price for a desired quantity and whether it is available."""

    price: int
    satisfied: bool


def quote(ranked_book: OrderBook, desired_quantity: int) -> Quote:
    """
    Quote a ranked book for a desired quantity.

    Args:
        ranked_book: Orders of one side, already in priority order
        desired_quantity: Quantity to accumulate

    Returns:
        Quote whose price is the limit of the last order touched (the
        marginal order) and whose `satisfied` flag is True iff the walked
        prefix covers the desired quantity. An empty book quotes (0, False).

    Orders after the marginal one are never inspected.
    """
    if not ranked_book:
        return Quote(0, False)

    last_price = 0
    remaining = desired_quantity
    for order in ranked_book:
        last_price = order.price
        remaining -= order.quantity
        if remaining <= 0:
            break

    return Quote(last_price, remaining <= 0)
