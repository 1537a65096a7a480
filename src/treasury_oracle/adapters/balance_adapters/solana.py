from __future__ import annotations

from ...logger import get_logger
from .base import BaseBalanceAdapter

logger = get_logger(__name__)


class SolanaAdapter(BaseBalanceAdapter):
    """Adapter for the Solana ``getBalance`` JSON-RPC method (lamports)."""

    @property
    def adapter_name(self) -> str:
        return "solana"

    async def _fetch_balance(self, endpoint_url: str) -> float:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getBalance",
            "params": [self.chain.address],
        }
        data = await self._post_json(endpoint_url, payload)

        result = data.get("result") if isinstance(data, dict) else None
        lamports = result.get("value") if isinstance(result, dict) else None
        if lamports is None:
            error = data.get("error") if isinstance(data, dict) else None
            logger.debug("No balance in Solana response: %s", error or data)
            return 0.0
        return self.to_native_units(int(lamports))
