"""
Settlement pricing rules.

A pricing rule turns the marginal sell quote and the marginal buy quote of a
feasible quantity into the single clearing price paid by every trade.

Rules:
    SplitTheDifference: floor midpoint, (sell + buy) // 2 (default)
    KDoublePricing: sell + floor(k * (buy - sell)) for k in [0, 1]
"""

import math
from fractions import Fraction
from typing import Any, Protocol


class PricingRule(Protocol):
    def price(self, sell_quote: int, buy_quote: int) -> int: ...


class SplitTheDifference:
    """
    Floor midpoint of the marginal quotes.

    Integer division truncates, so odd spreads round toward the sell quote.
    Venues that need a different rounding convention should supply their
    own rule rather than rely on this one.
    """

    def price(self, sell_quote: int, buy_quote: int) -> int:
        return (sell_quote + buy_quote) // 2

    def __repr__(self) -> str:
        return "SplitTheDifference()"


class KDoublePricing:
    """
    k-double auction rule: the price sits a fraction k of the way from the
    sell quote to the buy quote.

    k = 0 clears at the seller's quote, k = 1 at the buyer's quote and
    k = 1/2 matches SplitTheDifference.
    """

    def __init__(self, k: Fraction | float | str = Fraction(1, 2)):
        k = Fraction(k)
        if not 0 <= k <= 1:
            raise ValueError(f"k must lie in [0, 1], got {k}")
        self.k = k

    def price(self, sell_quote: int, buy_quote: int) -> int:
        return sell_quote + math.floor(self.k * (buy_quote - sell_quote))

    def __repr__(self) -> str:
        return f"KDoublePricing(k={self.k})"


def pricing_rule_from_config(pricing_cfg: Any) -> PricingRule:
    """
    Build a pricing rule from the `pricing` config section.

    Args:
        pricing_cfg: Mapping with `rule` ("midpoint" or "k_double") and `k`

    Raises:
        ValueError: On an unknown rule name or an out-of-range k.
    """
    rule = pricing_cfg.get("rule", "midpoint")
    if rule == "midpoint":
        return SplitTheDifference()
    if rule == "k_double":
        # Fraction("0.3") == 3/10, Fraction(0.3) is not
        return KDoublePricing(str(pricing_cfg.get("k", 0.5)))
    raise ValueError(f"Unknown pricing rule: {rule}")
