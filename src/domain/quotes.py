from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Protocol

QuoteDocument = dict[str, Any]

SOURCE_CURRENCY = "USD"
SENTINEL_QUOTE = -1.0
LEGACY_TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"

# Example excerpt of the live endpoint from the 7th of July 2018.
_DEFAULT_DOCUMENT: QuoteDocument = {
    "timestamp": "2018-07-07T01:00:00",
    "source": SOURCE_CURRENCY,
    "quotes": {
        "USDCHF": 0.989304,
        "USDGBP": 0.75252,
        "USDCAD": 1.307904,
        "USDAUD": 1.345204,
        "USDCZK": 22.01804,
        "USDRUB": 62.925201,
    },
}


class QuoteDataError(ValueError):
    """Raised when a cached or fetched quote document is structurally invalid."""


class CurrencyQuotes(Protocol):
    """Live exchange rates with USD as the fixed base currency.

    Free providers cap the number of requests per month, so implementations
    only hit the remote API once their refresh interval has elapsed.
    """

    def refresh(self) -> bool: ...

    def get_conversion_quote(self, currency: str | None) -> float: ...

    def convert_from_usd(self, currency: str | None, amount: float = 1.0) -> float: ...


def default_document() -> QuoteDocument:
    return copy.deepcopy(_DEFAULT_DOCUMENT)


def quote_key(currency: str) -> str:
    return f"{SOURCE_CURRENCY}{currency.upper()}"


def parse_timestamp(raw: Any) -> datetime:
    """Parse the ``timestamp`` field of a quote document into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings, the legacy ``MM/DD/YYYY HH:MM:SS``
    layout and unix epoch seconds. Naive values are read as UTC.
    """
    parsed: datetime | None = None
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            parsed = datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            parsed = None
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text, LEGACY_TIMESTAMP_FORMAT)
            except ValueError:
                parsed = None

    if parsed is None:
        raise QuoteDataError(f"Failed to parse quote document timestamp {raw!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


__all__ = [
    "CurrencyQuotes",
    "QuoteDataError",
    "QuoteDocument",
    "SENTINEL_QUOTE",
    "SOURCE_CURRENCY",
    "default_document",
    "parse_timestamp",
    "quote_key",
]
