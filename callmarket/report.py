"""Tabular fills report for a cleared auction."""

import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from callmarket.metrics import unit_surplus
from callmarket.settlement import Fill

logger = logging.getLogger(__name__)

FILL_COLUMNS = ["side", "order_id", "submitted_at", "limit_price", "quantity", "clearing_price", "surplus"]


def fills_frame(fills: Iterable[Fill], price: int) -> pd.DataFrame:
    """One row per fill, with the surplus each order earned at `price`."""
    rows = []
    for f in fills:
        rows.append(
            {
                "side": f.side.value,
                "order_id": f.order_id,
                "submitted_at": f.submitted_at,
                "limit_price": f.limit_price,
                "quantity": f.quantity,
                "clearing_price": price,
                "surplus": unit_surplus(f.side, f.limit_price, price) * f.quantity,
            }
        )
    return pd.DataFrame(rows, columns=FILL_COLUMNS)


def write_fills_csv(fills: Iterable[Fill], price: int, path: str | Path) -> Path:
    """Write the fills report as CSV, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fills_frame(fills, price).to_csv(path, index=False)
    logger.info(f"Fills report saved to {path}")
    return path
