import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from treasury_oracle.adapters.price_adapters import (
    CoinGeckoAdapter,
    StaticPriceAdapter,
    get_price_adapter,
)

SYMBOLS = ["BTC", "ETH", "BNB", "SOL", "XRP", "TON", "LUX", "ZOO"]


def _response(payload=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} error")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def adapter(config):
    return CoinGeckoAdapter(config)


def test_adapter_name(adapter):
    assert adapter.adapter_name == "coingecko"


def test_mainnet_selects_coingecko(config):
    assert isinstance(get_price_adapter(config), CoinGeckoAdapter)


def test_testnet_selects_static_table(testnet_config):
    assert isinstance(get_price_adapter(testnet_config), StaticPriceAdapter)


@pytest.mark.asyncio
async def test_fetches_all_symbols_in_one_request(adapter):
    payload = {
        "bitcoin": {"usd": 100000},
        "ethereum": {"usd": 3500.5},
        "binancecoin": {"usd": 600},
        "solana": {"usd": 200},
        "ripple": {"usd": 2.5},
        "the-open-network": {"usd": 5},
        "lux-network": {"usd": 0.5},
        "zoo-token": {"usd": 0.1},
    }
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response(payload),
    ) as mock_get:
        prices = await adapter.fetch_prices(SYMBOLS)

    assert mock_get.call_count == 1
    params = mock_get.call_args.kwargs["params"]
    assert params["vs_currencies"] == "usd"
    assert params["ids"].split(",") == [
        "bitcoin",
        "ethereum",
        "binancecoin",
        "solana",
        "ripple",
        "the-open-network",
        "lux-network",
        "zoo-token",
    ]
    assert prices["BTC"] == 100000.0
    assert prices["ETH"] == 3500.5
    assert prices["ZOO"] == 0.1
    assert set(prices) == set(SYMBOLS)


@pytest.mark.asyncio
async def test_missing_symbol_is_priced_zero(adapter):
    payload = {"bitcoin": {"usd": 100000}, "ethereum": {}, "solana": {"usd": "oops"}}
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response(payload),
    ):
        prices = await adapter.fetch_prices(["BTC", "ETH", "SOL", "XRP"])

    assert prices == {"BTC": 100000.0, "ETH": 0.0, "SOL": 0.0, "XRP": 0.0}


@pytest.mark.asyncio
async def test_unknown_symbol_is_priced_zero_without_request(adapter):
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get"
    ) as mock_get:
        prices = await adapter.fetch_prices(["DOGE"])

    assert prices == {"DOGE": 0.0}
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_client_error_prices_everything_zero(adapter):
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response(status_code=401),
    ) as mock_get:
        prices = await adapter.fetch_prices(["BTC", "ETH"])

    assert prices == {"BTC": 0.0, "ETH": 0.0}
    # 4xx other than 429 is not retried
    assert mock_get.call_count == 1


@pytest.mark.asyncio
async def test_rate_limit_is_retried(adapter):
    responses = [_response(status_code=429), _response({"bitcoin": {"usd": 1.0}})]
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        side_effect=responses,
    ) as mock_get:
        prices = await adapter.fetch_prices(["BTC"])

    assert prices == {"BTC": 1.0}
    assert mock_get.call_count == 2


@pytest.mark.asyncio
async def test_malformed_payload_prices_everything_zero(adapter):
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response(["not", "a", "dict"]),
    ):
        prices = await adapter.fetch_prices(["BTC", "ETH"])

    assert prices == {"BTC": 0.0, "ETH": 0.0}


@pytest.mark.asyncio
async def test_failure_falls_back_to_static_table_when_enabled(make_config):
    adapter = CoinGeckoAdapter(
        make_config(fetch_timeout=0.2, price_fallback_to_static=True)
    )
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        side_effect=requests.exceptions.ConnectionError("offline"),
    ):
        prices = await adapter.fetch_prices(["BTC", "ETH"])

    assert prices == {"BTC": 100000.0, "ETH": 3500.0}


@pytest.mark.asyncio
async def test_api_key_is_sent_as_header(make_config, monkeypatch):
    monkeypatch.setenv("TREASURY_ORACLE_COINGECKO_API_KEY", "cg-key")
    adapter = CoinGeckoAdapter(make_config())
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response({"bitcoin": {"usd": 1}}),
    ) as mock_get:
        await adapter.fetch_prices(["BTC"])

    assert mock_get.call_args.kwargs["headers"]["x-cg-demo-api-key"] == "cg-key"


@pytest.mark.asyncio
async def test_prices_are_keyed_as_requested(config, testnet_config):
    adapter = CoinGeckoAdapter(config)
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response({"bitcoin": {"usd": 100000}, "ethereum": {"usd": 3500}}),
    ) as mock_get:
        live = await adapter.fetch_prices(["btc", "Eth"])

    static = await StaticPriceAdapter(testnet_config).fetch_prices(["btc", "Eth"])

    assert mock_get.call_args.kwargs["params"]["ids"] == "bitcoin,ethereum"
    assert live == {"btc": 100000.0, "Eth": 3500.0}
    assert live == static


@pytest.mark.asyncio
async def test_static_fallback_is_keyed_as_requested(make_config):
    adapter = CoinGeckoAdapter(
        make_config(fetch_timeout=0.2, price_fallback_to_static=True)
    )
    with patch(
        "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
        return_value=_response(status_code=404),
    ):
        prices = await adapter.fetch_prices(["btc"])

    assert prices == {"btc": 100000.0}


@pytest.mark.asyncio
async def test_request_runs_on_given_executor(adapter):
    threads = []

    def _get(*args, **kwargs):
        threads.append(threading.current_thread().name)
        return _response({"bitcoin": {"usd": 1}})

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prices")
    try:
        with patch(
            "treasury_oracle.adapters.price_adapters.coingecko.requests.get",
            side_effect=_get,
        ):
            prices = await adapter.fetch_prices(["BTC"], executor=executor)
    finally:
        executor.shutdown()

    assert prices == {"BTC": 1.0}
    assert threads[0].startswith("prices")
