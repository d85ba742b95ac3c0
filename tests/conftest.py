# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import numpy as np
import pytest

from callmarket.orders import Market, Order, Side


def build_market(buys: list[tuple[int, int]], sells: list[tuple[int, int]]) -> Market:
    """Market from (price, quantity) pairs; timestamps follow list position."""
    market = Market()
    for i, (price, qty) in enumerate(buys):
        market.add(Order(side=Side.BUY, id=f"b{i}", submitted_at=i + 1, price=price, quantity=qty))
    for i, (price, qty) in enumerate(sells):
        market.add(Order(side=Side.SELL, id=f"s{i}", submitted_at=i + 1, price=price, quantity=qty))
    return market


@pytest.fixture
def make_market():
    """Builder for markets from (price, quantity) pairs."""
    return build_market


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)
