from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import Executor
from typing import Any, TypeVar

import requests

from ...config import TreasuryConfig
from ...domain import ChainEndpointConfig
from ...logger import get_logger
from ...threads import run_blocking

logger = get_logger(__name__)

T = TypeVar("T")


class BaseBalanceAdapter(ABC):
    """Abstract base class for native balance adapters.

    Subclasses implement :meth:`_fetch_balance` for one chain family and may
    raise freely. :meth:`fetch_native_balance` is the public contract: it
    bounds the call by ``config.fetch_timeout`` and turns every failure into
    a zero balance so one unreachable network cannot fail an aggregation.
    """

    def __init__(
        self,
        config: TreasuryConfig,
        chain: ChainEndpointConfig,
        executor: Executor | None = None,
    ):
        """Initialize the adapter.

        Args:
            config: Resolved treasury configuration
            chain: Chain whose treasury address is queried
            executor: Pool for blocking calls (the loop default when None)
        """
        self.config = config
        self.chain = chain
        self.executor = executor
        self.timeout = config.fetch_timeout

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def _fetch_balance(self, endpoint_url: str) -> float:
        """Fetch the treasury balance in whole native units."""
        ...

    async def fetch_native_balance(self, endpoint_url: str) -> float:
        """Fetch the treasury balance from one endpoint, 0.0 on any failure."""
        try:
            async with asyncio.timeout(self.timeout):
                balance = await self._fetch_balance(endpoint_url)
        except TimeoutError:
            logger.warning(
                "%s balance request to %s timed out after %.1fs",
                self.chain.chain_id,
                endpoint_url,
                self.timeout,
            )
            return 0.0
        except Exception as e:
            logger.warning(
                "%s balance request to %s failed: %s",
                self.chain.chain_id,
                endpoint_url,
                e,
            )
            return 0.0

        if not math.isfinite(balance) or balance < 0:
            logger.warning(
                "%s returned invalid balance %r from %s, using 0",
                self.chain.chain_id,
                balance,
                endpoint_url,
            )
            return 0.0

        logger.debug(
            "%s balance from %s: %f %s",
            self.chain.chain_id,
            endpoint_url,
            balance,
            self.chain.symbol,
        )
        return float(balance)

    def to_native_units(self, smallest_units: int | float) -> float:
        """Convert an amount in the chain's smallest unit to whole units."""
        return smallest_units / self.chain.divisor

    async def _run_blocking(
        self, fn: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> T:
        return await run_blocking(self.executor, fn, *args, **kwargs)

    async def _get_json(self, url: str, *, params: dict | None = None) -> Any:
        response = await self._run_blocking(
            requests.get, url, params=params, timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    async def _post_json(self, url: str, payload: dict[str, Any]) -> Any:
        response = await self._run_blocking(
            requests.post, url, json=payload, timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()
