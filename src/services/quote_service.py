from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol

import requests

from domain.quotes import (
    SENTINEL_QUOTE,
    CurrencyQuotes,
    QuoteDataError,
    QuoteDocument,
    parse_timestamp,
    quote_key,
)

from .currencylayer_client import CurrencyLayerClient
from .quote_store import DEFAULT_QUOTES_FILE, JsonFileQuoteStore, MemoryQuoteStore, QuoteStore
from .shell import ShellExecutor, SubprocessShell

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class QuoteFetcher(Protocol):
    def fetch_live(self) -> QuoteDocument | None: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CurrencyQuoteService(CurrencyQuotes):
    """USD conversion quotes served from a store, refreshed from the remote API.

    The remote API is only queried once ``refresh_minutes`` have elapsed since
    the timestamp of the cached document.
    """

    def __init__(
        self,
        *,
        fetcher: QuoteFetcher,
        store: QuoteStore,
        refresh_minutes: int,
        clock: Clock | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.refresh_minutes = abs(refresh_minutes)
        self._clock = clock or _utc_now
        self._document: QuoteDocument | None = None

    @property
    def document(self) -> QuoteDocument | None:
        """The document loaded by the last refresh, if any."""
        return self._document

    def refresh(self) -> bool:
        self._document = self.store.load()
        cached_at = parse_timestamp(self._document.get("timestamp"))

        now = self._now()
        elapsed_minutes = (now - cached_at).total_seconds() / 60
        if elapsed_minutes <= self.refresh_minutes:
            logger.debug("Quotes from %s are still fresh (%.1f min old)", cached_at.isoformat(), elapsed_minutes)
            return True

        logger.info("Quotes from %s are stale, fetching live quotes", cached_at.isoformat())
        fetched = self.fetcher.fetch_live()
        if fetched is None:
            return False

        fetched["timestamp"] = now.isoformat()
        self.store.save(fetched)
        self._document = fetched
        return True

    def get_conversion_quote(self, currency: str | None) -> float:
        if not currency or not self.refresh():
            return SENTINEL_QUOTE

        document = self._document
        if not document:
            raise QuoteDataError("The quote document is empty")

        quotes = document.get("quotes")
        if not isinstance(quotes, dict) or not quotes:
            raise QuoteDataError("The quote document has no quotes")

        key = quote_key(currency)
        if key not in quotes:
            logger.warning("No %s quote in the cached document", key)
            return SENTINEL_QUOTE

        raw = quotes[key]
        try:
            quote = float(raw)
        except (TypeError, ValueError) as exc:
            raise QuoteDataError(f"The {key} quote {raw!r} is not a number") from exc
        if quote <= sys.float_info.epsilon:
            raise QuoteDataError(f"The {key} quote {quote!r} is not a usable rate")
        return quote

    def convert_from_usd(self, currency: str | None, amount: float = 1.0) -> float:
        if not currency:
            return SENTINEL_QUOTE

        quote = self.get_conversion_quote(currency)
        if quote < 0:
            return SENTINEL_QUOTE
        return quote * abs(amount)

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)


def build_file_quote_service(
    api_key: str,
    refresh_minutes: int,
    *currencies: str,
    path: Path = DEFAULT_QUOTES_FILE,
    shell: ShellExecutor | None = None,
    base_url: str = "http://apilayer.net/api",
    timeout: float = 10.0,
    session: requests.Session | None = None,
    clock: Clock | None = None,
) -> CurrencyQuoteService:
    client = CurrencyLayerClient(
        api_key=api_key, currencies=currencies, base_url=base_url, timeout=timeout, session=session
    )
    if shell is None and os.name == "posix":
        shell = SubprocessShell()
    store = JsonFileQuoteStore(path=path, shell=shell)
    return CurrencyQuoteService(fetcher=client, store=store, refresh_minutes=refresh_minutes, clock=clock)


def build_memory_quote_service(
    api_key: str,
    refresh_minutes: int,
    *currencies: str,
    base_url: str = "http://apilayer.net/api",
    timeout: float = 10.0,
    session: requests.Session | None = None,
    clock: Clock | None = None,
) -> CurrencyQuoteService:
    client = CurrencyLayerClient(
        api_key=api_key, currencies=currencies, base_url=base_url, timeout=timeout, session=session
    )
    return CurrencyQuoteService(
        fetcher=client, store=MemoryQuoteStore(), refresh_minutes=refresh_minutes, clock=clock
    )


__all__ = [
    "CurrencyQuoteService",
    "QuoteFetcher",
    "build_file_quote_service",
    "build_memory_quote_service",
]
