from __future__ import annotations

from ...logger import get_logger
from .base import BaseBalanceAdapter

logger = get_logger(__name__)


class XRPAdapter(BaseBalanceAdapter):
    """Adapter for XRP Ledger account lookups.

    Explorer APIs (xrpscan) report ``xrpBalance`` in whole XRP; ledger-style
    APIs (xrpl-labs) report ``account_data.Balance`` in drops.
    """

    @property
    def adapter_name(self) -> str:
        return "xrp"

    async def _fetch_balance(self, endpoint_url: str) -> float:
        url = f"{endpoint_url.rstrip('/')}/account/{self.chain.address}"
        data = await self._get_json(url)
        if not isinstance(data, dict):
            return 0.0

        if data.get("xrpBalance") is not None:
            return float(data["xrpBalance"])

        account_data = data.get("account_data")
        drops = account_data.get("Balance") if isinstance(account_data, dict) else None
        if drops is None:
            logger.debug("Account %s not found at %s", self.chain.address, url)
            return 0.0
        return self.to_native_units(int(drops))
