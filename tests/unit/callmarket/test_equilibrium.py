# tests/unit/callmarket/test_equilibrium.py
"""
Tests for the feasibility oracle and the equilibrium search.

Each search result is checked against a brute-force scan of every candidate
quantity, so a broken bisection cannot hide behind a lucky example.
"""

import numpy as np
import pytest

from callmarket.equilibrium import AuctionResult, candidate_quantities, double_auction, find_equilibrium
from callmarket.errors import InvariantViolation
from callmarket.feasibility import NO_EQUILIBRIUM, Equilibrium, is_feasible
from callmarket.orders import rank_market
from callmarket.pricing import SplitTheDifference

MID = SplitTheDifference()


def brute_force(market, pricing=MID):
    """Largest feasible candidate by exhaustive scan (market must be ranked)."""
    for q in candidate_quantities(market):
        eq = is_feasible(market, int(q), pricing)
        if eq.found:
            return eq
    return NO_EQUILIBRIUM


class TestIsFeasible:
    def test_crossing_books(self, make_market):
        market = make_market([(500, 10)], [(400, 10)])
        assert is_feasible(market, 10, MID) == Equilibrium(True, 450, 10)

    def test_unavailable_quantity(self, make_market):
        market = make_market([(500, 10)], [(400, 10)])
        assert is_feasible(market, 11, MID) == NO_EQUILIBRIUM

    def test_negative_spread(self, make_market):
        market = make_market([(100, 5)], [(200, 5)])
        assert is_feasible(market, 5, MID) == NO_EQUILIBRIUM

    def test_zero_spread_is_feasible(self, make_market):
        market = make_market([(300, 5)], [(300, 5)])
        assert is_feasible(market, 5, MID) == Equilibrium(True, 300, 5)

    def test_empty_books(self, make_market):
        assert is_feasible(make_market([], [(1, 1)]), 1, MID) == NO_EQUILIBRIUM
        assert is_feasible(make_market([(1, 1)], []), 1, MID) == NO_EQUILIBRIUM

    def test_pricing_gets_sell_then_buy(self, make_market):
        calls = []

        class Recorder:
            def price(self, sell_quote, buy_quote):
                calls.append((sell_quote, buy_quote))
                return 0

        is_feasible(make_market([(500, 1)], [(400, 1)]), 1, Recorder())
        assert calls == [(400, 500)]


class TestCandidateQuantities:
    def test_cumulative_per_side_descending(self, make_market):
        market = make_market([(500, 5), (490, 10)], [(480, 8), (495, 7)])
        rank_market(market)
        assert candidate_quantities(market).tolist() == [15, 15, 8, 5]

    def test_follows_priority_order(self, make_market):
        market = make_market([(490, 10), (500, 5)], [])
        rank_market(market)
        assert candidate_quantities(market).tolist() == [15, 5]

    def test_dtype(self, make_market):
        market = make_market([(1, 2)], [(1, 3)])
        assert candidate_quantities(market).dtype == np.int64


class TestWorkedExamples:
    def test_single_pair_clears_at_midpoint(self, make_market):
        market = make_market([(500, 10)], [(400, 10)])
        result = double_auction(market)
        assert (result.found, result.price, result.quantity) == (True, 450, 10)
        assert market.buys == []
        assert market.sells == []

    def test_limited_by_sell_quote(self, make_market):
        market = make_market([(500, 5), (490, 10)], [(480, 8), (495, 7)])
        result = double_auction(market)
        assert (result.found, result.price, result.quantity) == (True, 485, 8)
        assert [(o.price, o.quantity) for o in market.buys] == [(490, 7)]
        assert [(o.price, o.quantity) for o in market.sells] == [(495, 7)]

    def test_wrong_way_cross_has_no_equilibrium(self, make_market):
        market = make_market([(100, 5)], [(200, 5)])
        result = double_auction(market)
        assert result == AuctionResult(False, 0, 0)
        assert [(o.price, o.quantity) for o in market.buys] == [(100, 5)]
        assert [(o.price, o.quantity) for o in market.sells] == [(200, 5)]


class TestEmptyBooks:
    @pytest.mark.parametrize("buys, sells", [([], [(100, 5)]), ([(100, 5)], []), ([], [])])
    def test_no_equilibrium_and_untouched(self, make_market, buys, sells):
        market = make_market(buys, sells)
        before = [list(book) for book in market.books()]
        result = double_auction(market)
        assert not result.found
        assert result.fills == []
        assert [list(book) for book in market.books()] == before

    def test_empty_books_skip_ranking(self, make_market):
        """An empty side short-circuits before the other side is sorted."""
        market = make_market([(100, 1), (300, 1)], [])
        double_auction(market)
        assert [o.price for o in market.buys] == [100, 300]


class TestSearch:
    def test_all_candidates_feasible_picks_largest(self, make_market):
        market = make_market([(900, 1)] * 6, [(100, 1)] * 6)
        rank_market(market)
        eq = find_equilibrium(market, MID)
        assert eq == Equilibrium(True, 500, 6)

    def test_large_book_matches_brute_force(self, make_market):
        buys = [(1000 - 7 * i, 3 + i % 4) for i in range(40)]
        sells = [(500 + 5 * i, 2 + i % 5) for i in range(40)]
        market = make_market(buys, sells)
        rank_market(market)
        assert find_equilibrium(market, MID) == brute_force(market)

    def test_random_books_match_brute_force(self, make_market, rng):
        for _ in range(50):
            nb, ns = rng.integers(1, 25, size=2)
            buys = list(zip(rng.integers(0, 200, nb).tolist(), rng.integers(1, 20, nb).tolist()))
            sells = list(zip(rng.integers(0, 200, ns).tolist(), rng.integers(1, 20, ns).tolist()))
            market = make_market(buys, sells)
            rank_market(market)
            assert find_equilibrium(market, MID) == brute_force(market)

    def test_optimality_violation_is_fatal(self, make_market, monkeypatch):
        """If one unit more than the answer still clears, the search aborts."""
        market = make_market([(500, 10)], [(400, 10)])
        rank_market(market)

        import callmarket.equilibrium as equilibrium_module

        def leaky(mkt, q, pricing):
            if q == 11:
                return Equilibrium(True, 450, 11)
            return is_feasible(mkt, q, pricing)

        monkeypatch.setattr(equilibrium_module, "is_feasible", leaky)
        with pytest.raises(InvariantViolation, match="not the largest"):
            find_equilibrium(market, MID)

    def test_non_monotone_bound_is_fatal(self, make_market, monkeypatch):
        """A tested quantity that flips from infeasible to feasible on re-check aborts."""
        market = make_market([(500, 1)] * 8, [(400, 1)] * 8)
        rank_market(market)

        import callmarket.equilibrium as equilibrium_module

        seen = {}

        def flaky(mkt, q, pricing):
            seen[q] = seen.get(q, 0) + 1
            # First look at each quantity: infeasible; afterwards feasible
            if seen[q] == 1:
                return NO_EQUILIBRIUM
            return Equilibrium(True, 450, q)

        monkeypatch.setattr(equilibrium_module, "is_feasible", flaky)
        with pytest.raises(InvariantViolation, match="tested infeasible"):
            find_equilibrium(market, MID)


class TestDoubleAuction:
    def test_default_pricing_is_midpoint(self, make_market):
        result = double_auction(make_market([(501, 1)], [(400, 1)]))
        assert result.price == 450

    def test_custom_pricing(self, make_market):
        class PayTheSeller:
            def price(self, sell_quote, buy_quote):
                return sell_quote

        result = double_auction(make_market([(500, 1)], [(400, 1)]), PayTheSeller())
        assert result.price == 400

    def test_fills_cover_both_sides(self, make_market):
        result = double_auction(make_market([(500, 5), (490, 10)], [(480, 8), (495, 7)]))
        buy_qty = sum(f.quantity for f in result.fills if f.side.value == "B")
        sell_qty = sum(f.quantity for f in result.fills if f.side.value == "S")
        assert buy_qty == sell_qty == result.quantity

    def test_price_time_priority_on_ties(self, make_market):
        """Same price: the earlier buy fills first."""
        market = make_market([(500, 5), (500, 5)], [(400, 5)])
        market.buys[0].submitted_at = 20
        market.buys[1].submitted_at = 10
        result = double_auction(market)
        assert result.quantity == 5
        assert [f.order_id for f in result.fills if f.side.value == "B"] == ["b1"]
        assert [o.id for o in market.buys] == ["b0"]
