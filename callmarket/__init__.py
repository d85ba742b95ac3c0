"""
callmarket - One-shot call (double) auction clearing.

Finds the largest quantity at which the marginal buy quote still covers the
marginal sell quote, settles every crossing order at one uniform price and
leaves the residual book behind.

Modules:
    orders: Order model, market container and price-time priority
    quote: Cumulative-quantity quoting over a ranked book
    pricing: Pluggable settlement pricing rules
    feasibility: Viability check for a candidate traded quantity
    equilibrium: Bisection search for the clearing quantity
    settlement: Applying the clearing to both books
"""

from callmarket.equilibrium import AuctionResult, double_auction, find_equilibrium
from callmarket.errors import CallMarketError, InvariantViolation, OrderParseError
from callmarket.orders import Market, Order, Side
from callmarket.pricing import KDoublePricing, SplitTheDifference

__version__ = "1.0.0"

__all__ = [
    "AuctionResult",
    "CallMarketError",
    "InvariantViolation",
    "KDoublePricing",
    "Market",
    "Order",
    "OrderParseError",
    "Side",
    "SplitTheDifference",
    "double_auction",
    "find_equilibrium",
]
