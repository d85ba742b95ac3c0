"""
Clear a call auction from an order file.

Usage:
    python scripts/clear_auction.py orders.txt
    python scripts/clear_auction.py orders.txt pricing.rule=k_double pricing.k=0.25
    cat orders.txt | python scripts/clear_auction.py logging.level=DEBUG
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from callmarket.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main(prog=sys.argv[0]))
