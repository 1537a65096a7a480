from __future__ import annotations

from ...logger import get_logger
from .base import BaseBalanceAdapter

logger = get_logger(__name__)


class BitcoinAdapter(BaseBalanceAdapter):
    """Adapter for Esplora-style block explorers (blockstream.info).

    The confirmed balance is the sum of funded outputs minus the sum of
    spent outputs from ``chain_stats``, in satoshi.
    """

    @property
    def adapter_name(self) -> str:
        return "bitcoin"

    async def _fetch_balance(self, endpoint_url: str) -> float:
        url = f"{endpoint_url.rstrip('/')}/address/{self.chain.address}"
        data = await self._get_json(url)

        stats = data.get("chain_stats") if isinstance(data, dict) else None
        if not isinstance(stats, dict):
            logger.debug("No chain_stats in explorer response for %s", url)
            return 0.0

        funded = int(stats.get("funded_txo_sum") or 0)
        spent = int(stats.get("spent_txo_sum") or 0)
        return self.to_native_units(max(funded - spent, 0))
