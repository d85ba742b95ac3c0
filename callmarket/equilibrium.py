"""
Equilibrium search for the call auction.

The clearing quantity is the largest quantity at which both sides can supply
the volume and the marginal buy quote is at least the marginal sell quote.

Only quantities at an order boundary need testing: feasibility is constant
between consecutive cumulative sums, so the candidate set is the running
cumulative quantity of each ranked book. Feasibility is non-increasing in
quantity (the buy quote only falls, the sell quote only rises and
availability only runs out), which makes the descending candidate list
bisectable.

Algorithm:
    1. Rank both books by price-time priority
    2. Collect cumulative quantities of both books, sort descending
    3. Bisect to a bracket of at most four candidates
    4. Scan the bracket for the first (largest) feasible candidate
    5. Check that quantity + 1 is infeasible (optimality)
    6. Settle both books at the equilibrium price
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from callmarket.errors import InvariantViolation
from callmarket.feasibility import NO_EQUILIBRIUM, Equilibrium, is_feasible
from callmarket.orders import Market, rank_market
from callmarket.pricing import PricingRule, SplitTheDifference
from callmarket.settlement import Fill, settle

logger = logging.getLogger(__name__)


@dataclass
class AuctionResult:
    """
    Outcome of one auction run.

    Attributes:
        found: True if an equilibrium exists
        price: Clearing price (0 when not found)
        quantity: Traded quantity per side (0 when not found)
        fills: Settled fills of both sides, buys first
    """

    found: bool
    price: int
    quantity: int
    fills: list[Fill] = field(default_factory=list)


def candidate_quantities(market: Market) -> np.ndarray:
    """
    Cumulative quantities at every order boundary of both ranked books.

    Returns:
        int64 array sorted descending (duplicates kept).
    """
    sums = [
        np.cumsum(np.fromiter((o.quantity for o in book), dtype=np.int64, count=len(book)))
        for book in market.books()
    ]
    return np.sort(np.concatenate(sums))[::-1]


def find_equilibrium(market: Market, pricing: PricingRule) -> Equilibrium:
    """
    Find the largest feasible quantity on an already ranked market.

    Args:
        market: Market whose books are in priority order
        pricing: Rule deriving the clearing price from the marginal quotes

    Returns:
        The equilibrium, or NO_EQUILIBRIUM if no candidate clears.

    Raises:
        InvariantViolation: If the search finds feasibility to be
            non-monotone (a bound proven infeasible turns out feasible, or
            one unit more than the answer still clears).
    """
    if market.is_empty_side():
        return NO_EQUILIBRIUM

    qcum = candidate_quantities(market)

    low, high = 0, len(qcum) - 1
    low_tested = False

    while high - low > 3:
        trial = (low + high) // 2
        eq = is_feasible(market, int(qcum[trial]), pricing)
        logger.debug(f"Trial q={qcum[trial]} (index {trial}): feasible={eq.found}")

        if eq.found:
            high = trial
        else:
            low = trial
            low_tested = True

    eq = NO_EQUILIBRIUM
    for j in range(low, high + 1):
        eq = is_feasible(market, int(qcum[j]), pricing)

        if eq.found:
            if j == low and low_tested and high != low:
                raise InvariantViolation(
                    f"Quantity {qcum[j]} tested infeasible during bisection is now feasible"
                )
            break

    if not eq.found:
        return NO_EQUILIBRIUM

    successor = eq.quantity + 1
    if is_feasible(market, successor, pricing).found:
        raise InvariantViolation(
            f"Quantity {successor} still clears; equilibrium {eq.quantity} is not the largest"
        )

    return eq


def double_auction(market: Market, pricing: PricingRule | None = None) -> AuctionResult:
    """
    Run one call auction over the market, mutating it in place.

    Ranks both books, searches for the equilibrium and, if one exists,
    settles it so that only the residual book remains.

    Args:
        market: Buy and sell books; owned exclusively by this call
        pricing: Clearing price rule (defaults to SplitTheDifference)

    Returns:
        AuctionResult with the price, quantity and fills. When either book
        is empty the market is returned untouched with found=False.
    """
    if pricing is None:
        pricing = SplitTheDifference()

    if market.is_empty_side():
        logger.info("One side of the market is empty; nothing to clear")
        return AuctionResult(False, 0, 0)

    rank_market(market)

    eq = find_equilibrium(market, pricing)
    if not eq.found:
        logger.info("No equilibrium found")
        return AuctionResult(False, 0, 0)

    logger.info(f"Equilibrium at p={eq.price}, q={eq.quantity}")
    fills = settle(market, eq.price, eq.quantity)
    return AuctionResult(True, eq.price, eq.quantity, fills)
