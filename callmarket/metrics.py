"""
Surplus and efficiency metrics for a cleared call auction.

- Actual surplus: what the settled fills earn at the uniform clearing price
- Max surplus: competitive-equilibrium surplus of the pre-auction books
- Allocative efficiency: actual / max as a percentage

Since the uniform price only transfers value between buyers and sellers,
total surplus depends on which units trade, not on the price.
"""

from collections.abc import Iterable

import numpy as np

from callmarket.orders import Order, Side
from callmarket.settlement import Fill


def unit_surplus(side: Side, limit_price: int, price: int) -> int:
    """Gain per unit for an order of `side` with `limit_price` trading at `price`."""
    return limit_price - price if side == Side.BUY else price - limit_price


def calculate_actual_surplus(fills: Iterable[Fill], price: int) -> dict[str, int]:
    """
    Surplus realised by the settled fills.

    Args:
        fills: Fills from settlement
        price: Clearing price

    Returns:
        Dictionary with buyer_surplus, seller_surplus and total_surplus.
    """
    fills = list(fills)
    limits = np.array([f.limit_price for f in fills], dtype=np.int64)
    qty = np.array([f.quantity for f in fills], dtype=np.int64)
    is_buy = np.array([f.side == Side.BUY for f in fills], dtype=bool)

    per_unit = np.where(is_buy, limits - price, price - limits)
    per_fill = per_unit * qty

    buyer = int(per_fill[is_buy].sum())
    seller = int(per_fill[~is_buy].sum())
    return {"buyer_surplus": buyer, "seller_surplus": seller, "total_surplus": buyer + seller}


def _steps(orders: Iterable[Order], descending: bool) -> tuple[np.ndarray, np.ndarray]:
    """Price steps of a supply or demand curve: (prices, cumulative quantity)."""
    pairs = sorted(((o.price, o.quantity) for o in orders if o.quantity > 0), reverse=descending)
    prices = np.array([p for p, _ in pairs], dtype=np.int64)
    cum = np.cumsum(np.array([q for _, q in pairs], dtype=np.int64))
    return prices, cum


def calculate_max_surplus(buys: Iterable[Order], sells: Iterable[Order]) -> int:
    """
    Maximum possible surplus (competitive equilibrium) of two books.

    Matches the highest bids with the lowest asks unit by unit while the
    bid is at least the ask. Works on quantity steps rather than single
    units, so large orders cost nothing extra.

    Args:
        buys: Buy orders before clearing
        sells: Sell orders before clearing

    Returns:
        Maximum surplus (integer)
    """
    bid_prices, bid_cum = _steps(buys, descending=True)
    ask_prices, ask_cum = _steps(sells, descending=False)
    if len(bid_prices) == 0 or len(ask_prices) == 0:
        return 0

    # Merge both step boundaries; each segment has a constant bid and ask
    bounds = np.union1d(bid_cum, ask_cum)
    bounds = bounds[bounds <= min(bid_cum[-1], ask_cum[-1])]
    starts = np.concatenate(([0], bounds[:-1]))
    widths = bounds - starts

    bid_at = bid_prices[np.searchsorted(bid_cum, bounds)]
    ask_at = ask_prices[np.searchsorted(ask_cum, bounds)]
    gains = (bid_at - ask_at) * widths

    return int(gains[bid_at >= ask_at].sum())


def calculate_allocative_efficiency(actual_surplus: int, max_surplus: int) -> float:
    """
    Allocative efficiency as a percentage.

    Special cases:
        - If max_surplus == 0: returns 100.0 (nothing to gain)
        - Result is clamped to [0, 100]
    """
    if max_surplus == 0:
        return 100.0

    efficiency = (actual_surplus / max_surplus) * 100.0
    return min(max(efficiency, 0.0), 100.0)
