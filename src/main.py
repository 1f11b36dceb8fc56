from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from config import AppSettings, config
from domain.quotes import SENTINEL_QUOTE
from services.quote_service import CurrencyQuoteService, build_file_quote_service, build_memory_quote_service


def build_quote_service(
    settings: AppSettings,
    *,
    storage: str,
    cache_file: Path,
    refresh_minutes: int,
) -> CurrencyQuoteService:
    common: dict[str, Any] = {
        "base_url": settings.currencylayer_base_url,
        "timeout": settings.currencylayer_timeout,
    }
    if storage == "memory":
        return build_memory_quote_service(
            settings.currencylayer_api_key, refresh_minutes, *settings.currency_codes, **common
        )
    return build_file_quote_service(
        settings.currencylayer_api_key, refresh_minutes, *settings.currency_codes, path=cache_file, **common
    )


def run(currency: str, amount: float, service: CurrencyQuoteService) -> dict[str, Any]:
    quote = service.get_conversion_quote(currency)
    converted = SENTINEL_QUOTE if quote < 0 else quote * abs(amount)
    document = service.document or {}
    return {
        "currency": currency.upper(),
        "amount_usd": abs(amount),
        "quote": quote,
        "converted": converted,
        "quotes_timestamp": document.get("timestamp"),
    }


def main(argv: Sequence[str] | None = None) -> None:
    settings = config()
    parser = argparse.ArgumentParser(description="Convert USD into another currency using cached currencylayer quotes.")
    parser.add_argument("--currency", required=True, help="Target currency ISO code (e.g. CHF).")
    parser.add_argument("--amount", type=float, default=1.0, help="Amount of USD to convert (default: 1).")
    parser.add_argument("--storage", choices=("file", "memory"), default="file")
    parser.add_argument("--cache-file", type=Path, default=settings.quotes_file)
    parser.add_argument("--refresh-minutes", type=int, default=settings.quotes_refresh_minutes)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    service = build_quote_service(
        settings,
        storage=args.storage,
        cache_file=args.cache_file,
        refresh_minutes=args.refresh_minutes,
    )
    print(json.dumps(run(args.currency, args.amount, service), indent=2))


if __name__ == "__main__":
    main()
