from __future__ import annotations

from ...logger import get_logger
from .base import BaseBalanceAdapter

logger = get_logger(__name__)


class TONAdapter(BaseBalanceAdapter):
    """Adapter for the toncenter ``getAddressBalance`` endpoint (nanotons)."""

    @property
    def adapter_name(self) -> str:
        return "ton"

    async def _fetch_balance(self, endpoint_url: str) -> float:
        url = f"{endpoint_url.rstrip('/')}/getAddressBalance"
        data = await self._get_json(url, params={"address": self.chain.address})

        nanotons = data.get("result") if isinstance(data, dict) else None
        if nanotons is None:
            logger.debug("No result in toncenter response: %s", data)
            return 0.0
        return self.to_native_units(int(nanotons))
