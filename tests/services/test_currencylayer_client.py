from __future__ import annotations

from typing import Any, cast
from unittest.mock import Mock

import pytest
import requests

from domain.quotes import QuoteDataError
from services.currencylayer_client import CurrencyLayerAPIError, CurrencyLayerClient


def _mock_response(payload: Any, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload
    response.text = "payload"
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


class _StubSession:
    def __init__(self, response: Mock) -> None:
        self._response = response
        self.requests: list[dict[str, Any]] = []

    def request(self, method: str, url: str, timeout: float | None = None) -> Mock:
        self.requests.append({"method": method, "url": url, "timeout": timeout})
        return self._response


def _client(session: Any, **kwargs: Any) -> CurrencyLayerClient:
    return CurrencyLayerClient(
        api_key="token",
        currencies=kwargs.pop("currencies", ("chf", "eur", "czk")),
        session=cast(requests.Session, session),
        **kwargs,
    )


def test_client_builds_live_url() -> None:
    client = _client(None)

    assert client.url == (
        "http://apilayer.net/api/live?access_key=token&currencies=CHF,EUR,CZK&source=USD&format=1"
    )
    assert client.currencies == ("CHF", "EUR", "CZK")


def test_client_respects_custom_base_url() -> None:
    client = _client(None, base_url="https://example.com/api/", currencies=["gbp"])

    assert client.url == "https://example.com/api/live?access_key=token&currencies=GBP&source=USD&format=1"


@pytest.mark.parametrize(
    ("api_key", "currencies"),
    [
        ("", ["CHF"]),
        (None, ["CHF"]),
        ("token", None),
        ("token", []),
        ("token", [""]),
    ],
)
def test_client_rejects_invalid_params(api_key: Any, currencies: Any) -> None:
    with pytest.raises(ValueError):
        CurrencyLayerClient(api_key=api_key, currencies=currencies)


def test_fetch_live_returns_payload(live_payload: dict[str, Any]) -> None:
    session = _StubSession(_mock_response(live_payload))
    client = _client(session, timeout=3.0)

    payload = client.fetch_live()

    assert payload == live_payload
    assert session.requests == [{"method": "GET", "url": client.url, "timeout": 3.0}]


def test_fetch_live_returns_none_for_http_error() -> None:
    session = _StubSession(_mock_response({"message": "nope"}, status_code=503))

    assert _client(session).fetch_live() is None


def test_fetch_live_returns_none_for_transport_error() -> None:
    session = Mock()
    session.request.side_effect = requests.ConnectionError("boom")

    assert _client(session).fetch_live() is None
    session.request.assert_called_once()


def test_fetch_live_returns_none_for_api_error_payload() -> None:
    payload = {"success": False, "error": {"code": 101, "type": "invalid_access_key", "info": "Invalid key"}}
    session = _StubSession(_mock_response(payload))

    assert _client(session).fetch_live() is None


def test_fetch_live_rejects_invalid_json() -> None:
    response = _mock_response(None)
    response.json.side_effect = ValueError("bad json")
    session = _StubSession(response)

    with pytest.raises(QuoteDataError):
        _client(session).fetch_live()


def test_fetch_live_rejects_non_object_payload() -> None:
    session = _StubSession(_mock_response([1, 2, 3]))

    with pytest.raises(QuoteDataError):
        _client(session).fetch_live()


def test_get_live_quotes_raises_with_status_code() -> None:
    session = _StubSession(_mock_response({"message": "nope"}, status_code=500))

    with pytest.raises(CurrencyLayerAPIError) as excinfo:
        _client(session).get_live_quotes()

    assert excinfo.value.status_code == 500
    assert excinfo.value.payload == {"message": "nope"}


def test_get_live_quotes_raises_for_api_error_payload() -> None:
    payload = {"success": False, "error": {"code": 101, "type": "invalid_access_key", "info": "Invalid key"}}
    session = _StubSession(_mock_response(payload))

    with pytest.raises(CurrencyLayerAPIError) as excinfo:
        _client(session).get_live_quotes()

    assert str(excinfo.value) == "Invalid key"
    assert excinfo.value.status_code == 101
    assert excinfo.value.payload == payload


def test_get_live_quotes_wraps_transport_error() -> None:
    session = Mock()
    session.request.side_effect = requests.Timeout("slow")

    with pytest.raises(CurrencyLayerAPIError):
        _client(session).get_live_quotes()


def test_get_live_quotes_wraps_invalid_json() -> None:
    response = _mock_response(None)
    response.json.side_effect = ValueError("bad json")
    session = _StubSession(response)

    with pytest.raises(CurrencyLayerAPIError):
        _client(session).get_live_quotes()
