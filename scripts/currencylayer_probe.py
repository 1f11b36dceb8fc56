# flake8: noqa E402
# Run via uv to load project deps, e.g.:
# uv run scripts/currencylayer_probe.py --currency CHF --currency EUR
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from services.currencylayer_client import CurrencyLayerClient


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch live USD quotes from currencylayer once.")
    parser.add_argument(
        "--currency",
        action="append",
        dest="currencies",
        help="Currency ISO code to request. Can be repeated; defaults to QUOTES_CURRENCIES.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = config()

    client = CurrencyLayerClient(
        api_key=settings.currencylayer_api_key,
        currencies=args.currencies or settings.currency_codes,
        base_url=settings.currencylayer_base_url,
        timeout=settings.currencylayer_timeout,
    )
    payload = client.get_live_quotes()
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
