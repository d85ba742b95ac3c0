"""Feasibility oracle: can the market trade a given total quantity?"""

from typing import NamedTuple

from callmarket.orders import Market
from callmarket.pricing import PricingRule
from callmarket.quote import quote


class Equilibrium(NamedTuple):
    found: bool
    price: int
    quantity: int


NO_EQUILIBRIUM = Equilibrium(False, 0, 0)


def is_feasible(market: Market, trial_quantity: int, pricing: PricingRule) -> Equilibrium:
    """
    Check whether `trial_quantity` can clear on the ranked market.

    Both sides must have the quantity available and the marginal buy quote
    must be at least the marginal sell quote (no negative spread).

    Returns:
        Equilibrium(True, price, trial_quantity) with the price set by
        `pricing` from (sell quote, buy quote), or NO_EQUILIBRIUM.
    """
    buy = quote(market.buys, trial_quantity)
    sell = quote(market.sells, trial_quantity)

    if buy.satisfied and sell.satisfied and buy.price >= sell.price:
        return Equilibrium(True, pricing.price(sell.price, buy.price), trial_quantity)

    return NO_EQUILIBRIUM
