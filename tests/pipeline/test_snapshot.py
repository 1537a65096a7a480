import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
import requests

from treasury_oracle.adapters.balance_adapters import BaseBalanceAdapter
from treasury_oracle.adapters.price_adapters import BasePriceAdapter
from treasury_oracle.config import TreasuryConfig
from treasury_oracle.domain import ChainEndpoint, ChainEndpointConfig, ChainFamily
from treasury_oracle.pipeline import collect_snapshot, default_snapshot
from treasury_oracle.processors.bonding_curve import CurveConfig
from treasury_oracle.settings import Network


class FakePriceAdapter(BasePriceAdapter):
    def __init__(self, config, prices, fail=False):
        super().__init__(config)
        self.prices = prices
        self.fail = fail
        self.calls = []
        self.executors = []

    @property
    def adapter_name(self) -> str:
        return "fake"

    async def fetch_prices(self, symbols, *, executor=None):
        self.calls.append(list(symbols))
        self.executors.append(executor)
        if self.fail:
            raise RuntimeError("price feed down")
        return {s: self.prices.get(s, 0.0) for s in symbols}


def _chain(chain_id, symbol, *urls):
    return ChainEndpointConfig(
        chain_id=chain_id,
        name=chain_id.title(),
        symbol=symbol,
        family=ChainFamily.EVM,
        address="0xabc",
        endpoints=tuple(ChainEndpoint(url, url.split("//")[-1]) for url in urls),
        decimals=18,
    )


def _config(*chains, fetch_timeout=0.1):
    return TreasuryConfig(
        network=Network.MAINNET,
        chains=tuple(chains),
        fetch_timeout=fetch_timeout,
        refresh_interval=30.0,
        coingecko_api_url="https://api.coingecko.example",
        coingecko_ids={},
        static_prices={},
        curve=CurveConfig(fund_target=100.0, allocations={"A": 0.5, "B": 0.5}),
    )


def _fake_fetch(results):
    """Patch target for ``_fetch_balance`` driven by endpoint URL."""

    async def _fetch(self, endpoint_url):
        outcome = results[endpoint_url]
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome == "hang":
            await asyncio.sleep(10)
        return outcome

    return _fetch


@pytest.mark.asyncio
async def test_timed_out_chain_is_valued_zero():
    config = _config(_chain("A", "AAA", "https://a"), _chain("B", "BBB", "https://b"))
    prices = FakePriceAdapter(config, {"AAA": 2.0, "BBB": 4.0})

    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _fake_fetch({"https://a": 10.0, "https://b": "hang"}),
    ):
        snapshot = await collect_snapshot(config, prices, now=123.0)

    assert snapshot.total_usd == 20.0
    assert snapshot.get("A").usd_value == 20.0
    assert snapshot.get("B").usd_value == 0.0
    assert snapshot.progress_pct == 20.0
    assert snapshot.last_updated == 123.0
    assert [c.chain_id for c in snapshot.chains] == ["A", "B"]


@pytest.mark.asyncio
async def test_every_chain_present_when_fetches_fail():
    config = _config(
        _chain("A", "AAA", "https://a"),
        _chain("B", "BBB", "https://b"),
        _chain("C", "CCC", "https://c"),
    )
    prices = FakePriceAdapter(config, {"AAA": 1.0, "BBB": 1.0, "CCC": 1.0})

    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _fake_fetch(
            {
                "https://a": ConnectionError("refused"),
                "https://b": 3.0,
                "https://c": ValueError("bad payload"),
            }
        ),
    ):
        snapshot = await collect_snapshot(config, prices)

    assert {c.chain_id for c in snapshot.chains} == {"A", "B", "C"}
    assert snapshot.chains[0].chain_id == "B"
    assert snapshot.total_usd == 3.0


@pytest.mark.asyncio
async def test_sub_chain_balances_are_summed():
    config = _config(
        _chain("A", "AAA", "https://l1", "https://l2", "https://l3"),
        _chain("B", "BBB", "https://b"),
    )
    prices = FakePriceAdapter(config, {"AAA": 10.0, "BBB": 1.0})

    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _fake_fetch(
            {
                "https://l1": 1.0,
                "https://l2": 0.5,
                "https://l3": RuntimeError("down"),
                "https://b": 1.0,
            }
        ),
    ):
        snapshot = await collect_snapshot(config, prices)

    chain_a = snapshot.get("A")
    assert chain_a.native_balance == 1.5
    assert chain_a.usd_value == 15.0
    assert chain_a.sub_chains == ("l1", "l2", "l3")
    assert snapshot.get("B").sub_chains is None


@pytest.mark.asyncio
async def test_price_failure_values_everything_zero():
    config = _config(_chain("A", "AAA", "https://a"))
    prices = FakePriceAdapter(config, {}, fail=True)

    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _fake_fetch({"https://a": 10.0}),
    ):
        snapshot = await collect_snapshot(config, prices)

    assert snapshot.get("A").native_balance == 10.0
    assert snapshot.get("A").price == 0.0
    assert snapshot.total_usd == 0.0


@pytest.mark.asyncio
async def test_prices_are_requested_once_per_symbol():
    config = _config(
        _chain("A", "ETH", "https://a"), _chain("B", "ETH", "https://b")
    )
    prices = FakePriceAdapter(config, {"ETH": 1.0})

    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _fake_fetch({"https://a": 1.0, "https://b": 2.0}),
    ):
        snapshot = await collect_snapshot(config, prices)

    assert prices.calls == [["ETH"]]
    assert snapshot.total_usd == 3.0


@pytest.mark.asyncio
async def test_fetches_run_concurrently():
    urls = [f"https://{name}" for name in "abcd"]
    config = _config(
        *(_chain(url[-1].upper(), "AAA", url) for url in urls), fetch_timeout=1.0
    )
    prices = FakePriceAdapter(config, {"AAA": 1.0})

    async def _slow(self, endpoint_url):
        await asyncio.sleep(0.2)
        return 1.0

    loop = asyncio.get_running_loop()
    with patch(
        "treasury_oracle.adapters.balance_adapters.evm.EVMAdapter._fetch_balance",
        _slow,
    ):
        started = loop.time()
        snapshot = await collect_snapshot(config, prices)
        elapsed = loop.time() - started

    assert snapshot.total_usd == 4.0
    assert elapsed < 0.6


@pytest.mark.asyncio
async def test_no_chains_configured_raises():
    config = _config()

    with pytest.raises(ValueError, match="No treasury chains"):
        await collect_snapshot(config, FakePriceAdapter(config, {}))


@pytest.mark.asyncio
async def test_collects_real_chain_table(config):
    prices = FakePriceAdapter(config, {"BTC": 100000.0})

    async def _fetch(self, endpoint_url):
        return 1.0 if self.chain.chain_id == "BITCOIN" else 0.0

    with patch.object(BaseBalanceAdapter, "fetch_native_balance", _fetch):
        snapshot = await collect_snapshot(config, prices)

    assert len(snapshot.chains) == 8
    assert snapshot.chains[0].chain_id == "BITCOIN"
    assert snapshot.total_usd == 100000.0
    assert snapshot.progress_pct == pytest.approx(0.1)
    assert snapshot.get("ETHEREUM").sub_chains == (
        "Mainnet",
        "Base",
        "Optimism",
        "Arbitrum",
    )


def test_default_snapshot_is_all_zero(config):
    snapshot = default_snapshot(config)

    assert len(snapshot.chains) == len(config.chains)
    assert snapshot.total_usd == 0.0
    assert snapshot.progress_pct == 0.0
    assert snapshot.last_updated == 0.0
    assert snapshot.stale is False
    assert [c.chain_id for c in snapshot.chains] == [c.chain_id for c in config.chains]


def _esplora_chain(chain_id, url):
    return ChainEndpointConfig(
        chain_id=chain_id,
        name=chain_id.title(),
        symbol="BTC",
        family=ChainFamily.BITCOIN,
        address="bc1qtreasury",
        endpoints=(ChainEndpoint(url),),
        decimals=8,
    )


def _esplora_response():
    response = MagicMock()
    response.json.return_value = {
        "chain_stats": {"funded_txo_sum": 100_000_000, "spent_txo_sum": 0}
    }
    return response


@pytest.mark.asyncio
async def test_hung_endpoints_do_not_starve_healthy_ones():
    loop = asyncio.get_running_loop()
    # Fewer default workers than hung endpoints
    loop.set_default_executor(ThreadPoolExecutor(max_workers=1))
    slow_chains = [_esplora_chain(f"SLOW{i}", f"https://slow{i}") for i in range(5)]
    config = _config(
        *slow_chains, _esplora_chain("HEALTHY", "https://healthy"), fetch_timeout=0.5
    )
    prices = FakePriceAdapter(config, {"BTC": 2.0})
    release = threading.Event()

    def _get(url, params=None, timeout=None):
        if not url.startswith("https://healthy"):
            release.wait(2.0)
        return _esplora_response()

    try:
        with patch(
            "treasury_oracle.adapters.balance_adapters.base.requests.get",
            side_effect=_get,
        ):
            started = loop.time()
            snapshot = await collect_snapshot(config, prices)
            elapsed = loop.time() - started
    finally:
        release.set()

    assert snapshot.get("HEALTHY").native_balance == 1.0
    assert snapshot.total_usd == 2.0
    assert all(snapshot.get(c.chain_id).usd_value == 0.0 for c in slow_chains)
    assert elapsed < 1.5
    assert prices.executors[0] is not None


def test_abandoned_requests_do_not_delay_loop_shutdown():
    config = _config(_esplora_chain("SLOW", "https://slow"), fetch_timeout=0.1)
    prices = FakePriceAdapter(config, {"BTC": 2.0})
    release = threading.Event()

    def _get(url, params=None, timeout=None):
        release.wait(3.0)
        raise requests.exceptions.ConnectionError("closed")

    try:
        with patch(
            "treasury_oracle.adapters.balance_adapters.base.requests.get",
            side_effect=_get,
        ):
            started = time.monotonic()
            snapshot = asyncio.run(collect_snapshot(config, prices))
            elapsed = time.monotonic() - started
    finally:
        release.set()

    assert snapshot.total_usd == 0.0
    assert elapsed < 1.5


@pytest.mark.asyncio
async def test_cancelled_collection_returns_promptly():
    config = _config(_esplora_chain("SLOW", "https://slow"), fetch_timeout=5.0)
    prices = FakePriceAdapter(config, {})
    release = threading.Event()

    def _get(url, params=None, timeout=None):
        release.wait(3.0)
        raise requests.exceptions.ConnectionError("closed")

    loop = asyncio.get_running_loop()
    try:
        with patch(
            "treasury_oracle.adapters.balance_adapters.base.requests.get",
            side_effect=_get,
        ):
            task = asyncio.create_task(collect_snapshot(config, prices))
            await asyncio.sleep(0.05)
            started = loop.time()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            elapsed = loop.time() - started
    finally:
        release.set()

    assert elapsed < 0.5
