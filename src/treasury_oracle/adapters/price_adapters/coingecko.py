from __future__ import annotations

import asyncio
import json
from concurrent.futures import Executor
from typing import Any

import backoff
import requests

from ...config import TreasuryConfig
from ...logger import get_logger
from ...threads import run_blocking
from .base import BasePriceAdapter

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _giveup(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


class CoinGeckoAdapter(BasePriceAdapter):
    """Adapter for the CoinGecko ``/simple/price`` endpoint.

    All symbols are priced with a single batched request. Transient HTTP
    errors are retried until ``config.fetch_timeout`` is spent; after that
    the affected symbols are priced 0.0 (or from the static table when
    ``price_fallback_to_static`` is set).
    """

    def __init__(self, config: TreasuryConfig):
        super().__init__(config)
        self.api_url = config.coingecko_api_url
        self.coingecko_ids = dict(config.coingecko_ids)
        self.timeout = config.fetch_timeout

    @property
    def adapter_name(self) -> str:
        return "coingecko"

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self.config.coingecko_api_key:
            headers["x-cg-demo-api-key"] = self.config.coingecko_api_key
        return headers

    async def fetch_simple_prices(
        self, coin_ids: list[str], executor: Executor | None = None
    ) -> dict[str, Any]:
        """Fetch the raw ``{coin_id: {"usd": price}}`` payload.

        Raises:
            ValueError: If the response is not a JSON object
            requests.exceptions.RequestException: If the request fails
        """

        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_time=self.timeout,
            giveup=_giveup,
            jitter=backoff.full_jitter,
        )
        async def _request() -> requests.Response:
            response = await run_blocking(
                executor,
                requests.get,
                f"{self.api_url}/simple/price",
                params={"ids": ",".join(coin_ids), "vs_currencies": "usd"},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response

        response = await _request()
        try:
            data = response.json()
        except json.JSONDecodeError:
            raise ValueError("Invalid JSON from CoinGecko API")

        if not isinstance(data, dict):
            raise ValueError(f"Invalid response structure: {data}")
        return data

    def _fallback(self, symbols: list[str]) -> dict[str, float]:
        if self.config.price_fallback_to_static:
            logger.warning("Using static price table for %s", ", ".join(symbols))
            return {
                symbol: self.normalize_price(
                    self.config.static_prices.get(symbol.upper(), 0.0)
                )
                for symbol in symbols
            }
        return {symbol: 0.0 for symbol in symbols}

    async def fetch_prices(
        self, symbols: list[str], *, executor: Executor | None = None
    ) -> dict[str, float]:
        ids_by_symbol = {
            symbol: self.coingecko_ids[symbol.upper()]
            for symbol in symbols
            if symbol.upper() in self.coingecko_ids
        }
        for symbol in dict.fromkeys(symbols):
            if symbol not in ids_by_symbol:
                logger.warning(
                    "No CoinGecko id configured for %s, pricing at 0", symbol
                )

        prices = {symbol: 0.0 for symbol in symbols}
        if not ids_by_symbol:
            return prices

        coin_ids = list(dict.fromkeys(ids_by_symbol.values()))
        try:
            async with asyncio.timeout(self.timeout):
                data = await self.fetch_simple_prices(coin_ids, executor)
        except TimeoutError:
            logger.warning("CoinGecko price request timed out after %.1fs", self.timeout)
            return self._fallback(symbols)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("CoinGecko price request failed: %s", e)
            return self._fallback(symbols)

        for symbol, coin_id in ids_by_symbol.items():
            entry = data.get(coin_id)
            raw = entry.get("usd") if isinstance(entry, dict) else None
            if raw is None:
                logger.warning("CoinGecko response has no USD price for %s", symbol)
                continue
            prices[symbol] = self.normalize_price(raw)

        logger.debug("Fetched %d prices from CoinGecko", len(prices))
        return prices
