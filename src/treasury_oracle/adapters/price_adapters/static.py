from __future__ import annotations

from concurrent.futures import Executor

from ...logger import get_logger
from .base import BasePriceAdapter

logger = get_logger(__name__)


class StaticPriceAdapter(BasePriceAdapter):
    """Fixed price table used on test networks. Never touches the network."""

    @property
    def adapter_name(self) -> str:
        return "static"

    async def fetch_prices(
        self, symbols: list[str], *, executor: Executor | None = None
    ) -> dict[str, float]:
        prices = {
            symbol: self.normalize_price(self.config.static_prices.get(symbol.upper(), 0.0))
            for symbol in symbols
        }
        missing = [symbol for symbol, price in prices.items() if price == 0.0]
        if missing:
            logger.warning("No static price for %s", ", ".join(missing))
        return prices
