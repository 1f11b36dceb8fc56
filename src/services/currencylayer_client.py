from __future__ import annotations

import logging
from typing import Any, Iterable

import requests
from requests import Response

from domain.quotes import SOURCE_CURRENCY, QuoteDataError, QuoteDocument

logger = logging.getLogger(__name__)


# API docs: https://currencylayer.com/documentation
class CurrencyLayerAPIError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class CurrencyLayerClient:
    def __init__(
        self,
        *,
        api_key: str,
        currencies: Iterable[str] | None,
        base_url: str = "http://apilayer.net/api",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            msg = "api_key must be provided"
            raise ValueError(msg)
        codes = [code for code in (currencies or ()) if code]
        if not codes:
            msg = "currencies must contain at least one ISO code"
            raise ValueError(msg)

        self.timeout = timeout
        self.currencies = tuple(code.upper() for code in codes)
        self.url = (
            f"{base_url.rstrip('/')}/live?access_key={api_key}"
            f"&currencies={','.join(self.currencies)}&source={SOURCE_CURRENCY}&format=1"
        )
        self._session = session

    def fetch_live(self) -> QuoteDocument | None:
        """Best-effort fetch of the live quotes.

        Returns ``None`` when the request fails or the API refuses it; a 2xx
        body that is not a JSON object raises ``QuoteDataError``.
        """
        try:
            return self._request()
        except CurrencyLayerAPIError as exc:
            logger.warning("currencylayer refresh failed (status %s): %s", exc.status_code, exc)
            return None

    def get_live_quotes(self) -> QuoteDocument:
        """Strict variant of ``fetch_live`` raising ``CurrencyLayerAPIError`` on any failure."""
        try:
            return self._request()
        except QuoteDataError as exc:
            raise CurrencyLayerAPIError(str(exc)) from exc

    def _request(self) -> QuoteDocument:
        try:
            response = self._get()
        except requests.RequestException as exc:
            raise CurrencyLayerAPIError(f"currencylayer request failed: {exc}") from exc

        if not response.ok:
            raise CurrencyLayerAPIError(
                f"currencylayer responded with HTTP {response.status_code}",
                status_code=response.status_code,
                payload=self._error_body(response),
            )

        payload = self._decode(response)
        if payload.get("success") is False:
            message, code = self._extract_error(payload)
            raise CurrencyLayerAPIError(message, status_code=code, payload=payload)
        return payload

    def _get(self) -> Response:
        if self._session is not None:
            return self._session.request("GET", self.url, timeout=self.timeout)
        with requests.Session() as session:
            return session.request("GET", self.url, timeout=self.timeout)

    @staticmethod
    def _error_body(response: Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _decode(response: Response) -> QuoteDocument:
        try:
            payload = response.json()
        except ValueError as exc:
            raise QuoteDataError("currencylayer returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise QuoteDataError(f"currencylayer returned unexpected payload type {type(payload).__name__}")
        return payload

    @staticmethod
    def _extract_error(payload: dict[str, Any]) -> tuple[str, int | None]:
        error = payload.get("error")
        if not isinstance(error, dict):
            return "currencylayer error", None
        message = error.get("info") or error.get("type") or "currencylayer error"
        code = error.get("code")
        return str(message), code if isinstance(code, int) else None


__all__ = ["CurrencyLayerAPIError", "CurrencyLayerClient"]
