"""Treasury snapshot collection from every configured chain."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import Any

from ..adapters.balance_adapters import get_adapter_class
from ..adapters.price_adapters import BasePriceAdapter, get_price_adapter
from ..config import TreasuryConfig
from ..domain import ChainEndpoint, ChainEndpointConfig, TreasurySnapshot
from ..logger import get_logger
from ..processors import build_chain_balances, build_snapshot
from ..threads import fetch_executor

logger = get_logger(__name__)


def _process_balance_results(
    tasks_info: list[tuple[ChainEndpointConfig, ChainEndpoint]],
    results: list[BaseException | float],
) -> dict[str, float]:
    """Sum balance results per chain.

    Adapters never raise, but anything that slips through is logged and
    counted as zero for that endpoint only.
    """
    balances: dict[str, float] = {}
    for (chain, endpoint), result in zip(tasks_info, results):
        if isinstance(result, BaseException):
            logger.error(
                "Balance fetch for %s at %s raised: %s",
                chain.chain_id,
                endpoint.url,
                result,
            )
            result = 0.0
        elif endpoint.label:
            logger.debug(
                "%s (%s) balance: %f %s",
                chain.chain_id,
                endpoint.label,
                result,
                chain.symbol,
            )
        balances[chain.chain_id] = balances.get(chain.chain_id, 0.0) + result
    return balances


def _process_price_result(
    symbols: list[str], result: BaseException | dict[str, float]
) -> dict[str, float]:
    if isinstance(result, BaseException):
        logger.error("Price fetch raised: %s", result)
        return {symbol: 0.0 for symbol in symbols}
    return {symbol: result.get(symbol, 0.0) for symbol in symbols}


async def collect_snapshot(
    config: TreasuryConfig,
    price_adapter: BasePriceAdapter | None = None,
    *,
    now: float | None = None,
) -> TreasurySnapshot:
    """Fetch every treasury balance and the USD prices concurrently.

    One task is spawned per chain endpoint (EVM networks sharing an address
    get one task each) plus a single price task. The snapshot is only built
    once all of them have settled.

    Blocking requests run on a thread pool created for this call with one
    worker per fetch. The pool is shut down without waiting, so requests
    abandoned at their deadline never delay the caller.

    Args:
        config: Resolved treasury configuration
        price_adapter: Price source; defaults to the one selected by the config
        now: Timestamp to stamp the snapshot with (defaults to time.time())

    Returns:
        A snapshot covering every configured chain. Unreachable chains are
        valued at zero.

    Raises:
        ValueError: If no chains are configured
    """
    if not config.chains:
        raise ValueError("No treasury chains configured")

    price_adapter = price_adapter or get_price_adapter(config)
    symbols = config.symbols

    # One worker per balance endpoint plus one for the price request
    fetch_count = sum(len(chain.endpoints) for chain in config.chains)
    executor = fetch_executor(fetch_count + 1)

    tasks_info: list[tuple[ChainEndpointConfig, ChainEndpoint]] = []
    balance_tasks: list[Awaitable[float]] = []
    for chain in config.chains:
        adapter = get_adapter_class(chain.family)(config, chain, executor)
        for endpoint in chain.endpoints:
            tasks_info.append((chain, endpoint))
            balance_tasks.append(adapter.fetch_native_balance(endpoint.url))

    logger.info(
        "Fetching %d balances across %d chains and %d prices via %s...",
        len(balance_tasks),
        len(config.chains),
        len(symbols),
        price_adapter.adapter_name,
    )

    try:
        results: list[Any] = await asyncio.gather(
            *balance_tasks,
            price_adapter.fetch_prices(symbols, executor=executor),
            return_exceptions=True,
        )
    finally:
        # Timed-out requests keep their threads until the socket timeout;
        # nothing waits for them.
        executor.shutdown(wait=False, cancel_futures=True)
    balances = _process_balance_results(tasks_info, results[:-1])
    prices = _process_price_result(symbols, results[-1])

    snapshot = build_snapshot(
        build_chain_balances(config.chains, balances, prices),
        fund_target=config.fund_target,
        is_testnet=config.is_testnet,
        last_updated=time.time() if now is None else now,
    )
    logger.info(
        "Treasury total $%.2f (%.2f%% of target)",
        snapshot.total_usd,
        snapshot.progress_pct,
    )
    return snapshot


def default_snapshot(config: TreasuryConfig) -> TreasurySnapshot:
    """All-zero snapshot covering every configured chain."""
    return build_snapshot(
        build_chain_balances(config.chains, {}, {}),
        fund_target=config.fund_target,
        is_testnet=config.is_testnet,
        last_updated=0.0,
    )
