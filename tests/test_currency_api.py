"""
test_currency_api.py: выбор запроса к exchangerate-api и обработка ошибок
"""

import pytest
import requests
from unittest.mock import MagicMock, patch
from currency_api import CurrencyAPI, RateLookup

BASE_URL = "https://rates.test/v6"


def make_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def api():
    return CurrencyAPI(base_url=BASE_URL, timeout=5)


@patch("currency_api.requests.get")
def test_single_target_uses_pair_endpoint(mock_get, api):
    mock_get.return_value = make_response({"result": "success", "conversion_rate": 0.85})

    lookup = api.resolve_rates("KEY", "USD", ["EUR"], "100")

    assert lookup.ok
    assert lookup.rates == {"EUR": 0.85}
    mock_get.assert_called_once_with(f"{BASE_URL}/KEY/pair/USD/EUR/100", timeout=5)


@patch("currency_api.requests.get")
def test_several_targets_use_latest_endpoint_once(mock_get, api):
    mock_get.return_value = make_response({
        "result": "success",
        "conversion_rates": {"USD": 1, "EUR": 0.85, "GBP": 0.75, "JPY": 150.2},
    })

    lookup = api.resolve_rates("KEY", "USD", ["GBP", "EUR"], "1")

    assert lookup.rates == {"GBP": 0.75, "EUR": 0.85}
    mock_get.assert_called_once_with(f"{BASE_URL}/KEY/latest/USD", timeout=5)


@patch("currency_api.requests.get")
def test_missing_targets_are_dropped(mock_get, api):
    mock_get.return_value = make_response({
        "result": "success",
        "conversion_rates": {"EUR": 0.85, "JPY": 150.2},
    })

    lookup = api.resolve_rates("KEY", "USD", ["EUR", "XYZ", "JPY"], "1")

    assert lookup.ok
    assert list(lookup.rates) == ["EUR", "JPY"]


@patch("currency_api.requests.get")
def test_provider_error_is_failure(mock_get, api):
    mock_get.return_value = make_response({"result": "error", "error-type": "invalid-key"})

    assert not api.resolve_rates("KEY", "USD", ["EUR"], "1").ok
    assert not api.resolve_rates("KEY", "USD", ["EUR", "GBP"], "1").ok


@patch("currency_api.requests.get")
def test_http_status_error_is_failure(mock_get, api):
    response = make_response({})
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("403")
    mock_get.return_value = response

    assert api.resolve_rates("KEY", "USD", ["EUR"], "1") == RateLookup.failure()


@patch("currency_api.requests.get")
def test_network_error_is_failure(mock_get, api):
    mock_get.side_effect = requests.exceptions.ConnectionError("offline")

    assert not api.resolve_rates("KEY", "USD", ["EUR", "GBP"], "1").ok


@patch("currency_api.requests.get")
def test_bad_json_is_failure(mock_get, api):
    response = make_response(None)
    response.json.side_effect = ValueError("no json")
    mock_get.return_value = response

    assert not api.resolve_rates("KEY", "USD", ["EUR"], "1").ok


@patch("currency_api.requests.get")
def test_pair_without_rate_is_failure(mock_get, api):
    mock_get.return_value = make_response({"result": "success"})

    assert not api.resolve_rates("KEY", "USD", ["EUR"], "1").ok


@patch("currency_api.requests.get")
def test_latest_without_rates_is_failure(mock_get, api):
    mock_get.return_value = make_response({"result": "success"})

    assert not api.resolve_rates("KEY", "USD", ["EUR", "GBP"], "1").ok


def test_rate_lookup_copies_rates():
    rates = {"EUR": 0.85}
    lookup = RateLookup.success(rates)
    rates["GBP"] = 0.75

    assert lookup.rates == {"EUR": 0.85}
