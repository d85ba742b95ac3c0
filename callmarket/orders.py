"""
Order model and price-time priority for the call auction.

A Market holds two order books (buys and sells). Each book is a plain list of
Order records ranked by price-time priority:
- Buys: price descending, earlier submission first on ties
- Sells: price ascending, earlier submission first on ties

The same ranking drives quoting and settlement. It is recomputed once per
auction run rather than maintained incrementally.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from callmarket.errors import OrderParseError


class Side(str, Enum):
    """Order side, valued by its one-character record tag."""

    BUY = "B"
    SELL = "S"

    @classmethod
    def from_tag(cls, tag: str) -> "Side":
        """
        Resolve a record tag ("B" or "S") to a Side.

        Raises:
            OrderParseError: For any other tag.
        """
        try:
            return cls(tag)
        except ValueError:
            raise OrderParseError(f"Invalid character '{tag}'") from None


@dataclass
class Order:
    """
    A resting limit order.

    Attributes:
        side: Buy or sell
        id: Opaque identifier (uniqueness is not enforced)
        submitted_at: Submission time in nanoseconds, used only to break ties
        price: Limit price (non-negative integer)
        quantity: Remaining unfilled quantity; only settlement reduces it
    """

    side: Side
    id: str
    submitted_at: int
    price: int
    quantity: int


OrderBook = list[Order]


@dataclass
class Market:
    """The buy book and the sell book of one auction run."""

    buys: OrderBook = field(default_factory=list)
    sells: OrderBook = field(default_factory=list)

    def add(self, order: Order) -> None:
        """Append an order to the book of its side."""
        self.book(order.side).append(order)

    def book(self, side: Side) -> OrderBook:
        return self.buys if side == Side.BUY else self.sells

    def books(self) -> Iterator[OrderBook]:
        """Yield the buy book, then the sell book."""
        yield self.buys
        yield self.sells

    def is_empty_side(self) -> bool:
        """True when either side has no orders (nothing can trade)."""
        return not self.buys or not self.sells

    def total_quantity(self, side: Side) -> int:
        return sum(o.quantity for o in self.book(side))

    def __len__(self) -> int:
        return len(self.buys) + len(self.sells)


def better(a: Order, b: Order) -> bool:
    """
    Strict priority relation over two orders of the same side.

    Returns True if `a` ranks ahead of `b`: better price first (higher for
    buys, lower for sells), then earlier submission time.
    """
    if a.side == Side.BUY:
        return a.price > b.price or (a.price == b.price and a.submitted_at < b.submitted_at)
    return a.price < b.price or (a.price == b.price and a.submitted_at < b.submitted_at)


def priority_key(order: Order) -> tuple[int, int]:
    """Sort key consistent with `better`: smaller keys rank first."""
    if order.side == Side.BUY:
        return (-order.price, order.submitted_at)
    return (order.price, order.submitted_at)


def rank_book(book: OrderBook) -> None:
    """Sort one book in place by price-time priority."""
    book.sort(key=priority_key)


def rank_market(market: Market) -> None:
    """Sort both books of the market in place."""
    for book in market.books():
        rank_book(book)
